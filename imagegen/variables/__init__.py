"""
Template variables module.
Implements the render context, template functions and 'for' iteration expansion.
"""

from .rendering import RenderContext, TemplateRenderer, template_functions
from .iteration import run_iterations

__all__ = ['RenderContext', 'TemplateRenderer', 'template_functions', 'run_iterations']
