"""
Baaba API package.

Provides the FastAPI application for the Baaba session and role
authorization core.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
