"""
Application package initializer.

The API is organised by layer: ``core`` holds configuration, storage,
security and logging; ``schemas`` the request and response models;
``services`` the business logic; ``api/v1`` the HTTP routers.  Each
domain (mumineen, events, pass preferences, etc.) has a module in each
layer.
"""

from .main import app  # noqa: F401
