"""HTTP and WebSocket routers."""

from . import auth, generate, health, operations, share, templates

routers = [
    generate.router,
    templates.router,
    share.router,
    auth.router,
    operations.router,
    health.router,
]

__all__ = ["routers"]
