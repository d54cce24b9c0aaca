"""
Top-level package for the Miqaat Management API.

Modules live under ``app`` and are imported by their fully qualified
names, e.g. ``miqaat_api.app.main``.
"""

__all__ = []
