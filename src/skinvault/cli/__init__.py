"""
CLI interface module for skinvault.

Provides the Typer-based command-line interface for running the API server,
initialising the database and managing the render cache.
"""

from __future__ import annotations

__all__: list[str] = []
