"""End-to-end tests for imagegen using a real build tool.

These tests are:
- Skipped by default (require IMAGEGEN_E2E environment variable)
- Dependent on docker being available
- Slower than unit tests
"""
