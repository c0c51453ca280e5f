"""
Configuration management module for skinvault.

Handles application settings, environment variables, database configuration,
and storage locations.
"""

from __future__ import annotations

__all__: list[str] = []
