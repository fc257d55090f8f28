"""Remote procedure clients."""

from .backend import ComponentServerClient, RemoteClient

__all__ = ["ComponentServerClient", "RemoteClient"]
