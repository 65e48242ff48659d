"""Manifold CLI - Command-line interface for manifold projects.

Commands:
- manifold init: Create a new project
- manifold add: Add a workspace to the project
- manifold vectors add: Add a vector configuration
- manifold generate: Generate schemas, routines and Terraform
- manifold describe: Show the resolved metrics groups of a workspace
- manifold version: Show version information
"""

from .main import app

__all__ = ["app"]
