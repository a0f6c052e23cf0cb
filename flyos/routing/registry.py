"""Registry of route types by protocol name."""

from __future__ import annotations

import threading
from collections.abc import Callable

from flyos.routing.routes import BGPRoute, OSPFRoute, PBRRule, Route, StaticRoute

RouteFactory = Callable[[], Route]

_lock = threading.RLock()
_handlers: dict[str, RouteFactory] = {}
_enabled_by_default: dict[str, bool] = {}


def register_route(proto: str, is_default_enabled: bool, factory: RouteFactory) -> None:
    """Register a factory for ``proto``; registering a protocol twice is an error."""
    with _lock:
        if proto in _handlers:
            raise ValueError(f"route type already registered: {proto}")
        _handlers[proto] = factory
        _enabled_by_default[proto] = is_default_enabled


def new_route_by_proto(proto: str) -> Route:
    """Create a fresh route of the type registered for ``proto``."""
    with _lock:
        factory = _handlers.get(proto)
    if factory is None:
        raise LookupError(f"unknown route proto: {proto}")
    return factory()


def route_key(route: Route) -> str:
    """Return the identity of a route: its protocol and prefix."""
    return f"{route.proto}|{route.prefix}"


register_route("bgp", True, BGPRoute)
register_route("ospf", False, OSPFRoute)
register_route("pbr", True, PBRRule)
register_route("static", True, StaticRoute)