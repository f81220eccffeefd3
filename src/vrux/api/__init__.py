"""FastAPI surface: routers, dependencies and error handlers."""

from .errors import register_error_handlers
from .routes import routers

__all__ = ["register_error_handlers", "routers"]
