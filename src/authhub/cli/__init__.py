"""authhub CLI - developer tooling over the security primitives.

Subcommand groups:
- remember-me: inspect or clear the stored remember-me credential
"""

from authhub.cli.main import app, main

__all__ = ["app", "main"]
