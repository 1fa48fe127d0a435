"""Fixtures and utilities for E2E tests."""

import os
import shutil
from pathlib import Path

import pytest


def has_cli(command: str) -> bool:
    """Check if a CLI command is available."""
    return shutil.which(command) is not None


def skip_if_no_cli(command: str) -> None:
    """Skip test if CLI command is not available."""
    if not has_cli(command):
        pytest.skip(f"{command} CLI not available")


def skip_if_no_e2e() -> None:
    """Skip test if E2E tests are not enabled."""
    if not os.getenv("IMAGEGEN_E2E"):
        pytest.skip("E2E tests disabled (set IMAGEGEN_E2E to enable)")


@pytest.fixture
def docker_cli():
    """Skip unless E2E tests are enabled and docker is installed."""
    skip_if_no_e2e()
    skip_if_no_cli("docker")
    return "docker"


@pytest.fixture
def e2e_workspace(tmp_path):
    """Create a workspace holding a configuration and its build templates."""
    workspace = tmp_path / "e2e_workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def write_build_template(e2e_workspace):
    """Return a helper creating a build file template in its own context directory."""
    def write(name: str, content: str) -> Path:
        context_dir = e2e_workspace / name
        context_dir.mkdir(exist_ok=True)
        template_path = context_dir / "Dockerfile.tmpl"
        template_path.write_text(content)
        return template_path
    return write
