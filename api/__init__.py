"""API server module"""

from .api_server import app, create_app

__all__ = ["app", "create_app"]
