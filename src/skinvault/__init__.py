"""
skinvault - Avatar texture storage and render cache.

Stores uploaded skin and cape textures per player identity and serves
derived renders (avatar faces, heads) at arbitrary sizes from a
fingerprint-keyed artifact cache.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "skinvault"
__email__ = "noreply@skinvault.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
