"""HTTP/RPC transport for the listing services."""

from .app import create_app

__all__ = ["create_app"]
