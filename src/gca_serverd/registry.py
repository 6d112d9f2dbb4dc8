"""Server factory resolution.

The GCA server is an external package. The supervisor locates its factory
from a ``module:attribute`` reference, by default
``gca_backend.server:new_gca_server``.

Usage:
    factory = resolve_server_factory("gca_backend.server:new_gca_server")
    server = factory(server_dir, internal_test_mode)
"""

import importlib
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol, Union

from gca_serverd.errors import ServerFactoryError


_log = logging.getLogger("registry")


class ManagedServer(Protocol):
    """Interface the supervisor needs from a running server."""

    def close(self) -> Any:
        """Blocking (or coroutine) shutdown, return value is ignored."""
        ...


ServerFactory = Callable[[Path, bool], Union[ManagedServer, Awaitable[ManagedServer]]]


def resolve_server_factory(reference: str) -> ServerFactory:
    """Resolve ``package.module:attribute`` to a server factory callable.

    Args:
        reference: Factory reference, attribute part may be dotted
                   (e.g. ``pkg.mod:Server.create``)

    Raises:
        ServerFactoryError: If the reference is malformed, the module cannot
            be imported or the target is missing or not callable
    """
    module_path, sep, attr_path = reference.partition(":")
    if not sep or not module_path or not attr_path:
        raise ServerFactoryError(
            f"Invalid server factory reference {reference!r}, expected 'module:attribute'"
        )

    try:
        target = importlib.import_module(module_path)
    except ImportError as e:
        raise ServerFactoryError(f"Cannot import module {module_path!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise ServerFactoryError(
                f"Module {module_path!r} has no attribute {attr_path!r}"
            ) from e

    if not callable(target):
        raise ServerFactoryError(f"Server factory {reference!r} is not callable")

    _log.debug(f"Resolved server factory {reference} -> {target!r}")
    return target
