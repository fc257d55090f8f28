"""Binds component server functions to a remote client."""

from typing import Any, Awaitable, Callable, Iterable

from .clients.backend import RemoteClient

ServerFunctions = dict[str, Callable[..., Awaitable[Any]]]


def process_server_fn(
    id: int, server_fns: Iterable[str] | None, client: RemoteClient
) -> ServerFunctions:
    """
    Build the callables for a component's declared server functions.

    A single positional argument is forwarded unwrapped; zero or several
    arguments are forwarded as a list.

    Args:
        id: Component id
        server_fns: Declared function names
        client: Remote procedure client

    Returns:
        Function name to coroutine function
    """
    if not server_fns:
        return {}
    return {fn: _bind(id, fn, client) for fn in server_fns}


def _bind(id: int, fn: str, client: RemoteClient) -> Callable[..., Awaitable[Any]]:
    async def server_fn(*args: Any) -> Any:
        data: Any = args[0] if len(args) == 1 else list(args)
        return await client.component_server(id, fn, data)

    server_fn.__name__ = fn
    return server_fn


__all__ = ["process_server_fn", "ServerFunctions"]
