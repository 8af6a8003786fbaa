from .app import create_app
from .handlers import routes

__all__ = ["create_app", "routes"]
