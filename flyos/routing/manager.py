"""Route managers that apply routes through external commands."""

from __future__ import annotations

import abc
import json
import subprocess
from collections.abc import Iterable

from flyos.routing.routes import BGPRoute, OSPFRoute, PBRRule, Route, RouteError, StaticRoute


class RouteCommandError(RuntimeError):
    """An external route command could not be run or failed."""


class RouteManager(abc.ABC):
    """Applies and queries routes on some backend."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short name of the backend."""

    @abc.abstractmethod
    def add(self, route: Route) -> None:
        """Install a route."""

    @abc.abstractmethod
    def set(self, route: Route) -> None:
        """Update a route."""

    @abc.abstractmethod
    def remove(self, route: Route) -> None:
        """Delete a route."""

    @abc.abstractmethod
    def list(self) -> list[Route]:
        """Return the installed routes."""

    @abc.abstractmethod
    def sync(self, routes: Iterable[Route]) -> None:
        """Replace the installed routes with ``routes``."""


_LIST_TYPES: tuple[tuple[str, type[Route]], ...] = (
    ("static", StaticRoute),
    ("ospf", OSPFRoute),
    ("bgp", BGPRoute),
    ("pbr", PBRRule),
)


class CLIManager(RouteManager):
    """Runs ``<op>_ipv4_<proto>_route`` programs found on the PATH."""

    @property
    def name(self) -> str:
        return "cli"

    def _do_op(self, op: str, route: Route) -> None:
        route.validate()
        args = route.to_args()
        program = f"{op}_ipv4_{route.proto}_route"
        try:
            result = subprocess.run(
                [program, *args],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise RouteCommandError(f"exec failed: {exc}; output: ") from exc
        if result.returncode != 0:
            output = result.stdout.decode(errors="replace").strip()
            raise RouteCommandError(
                f"exec failed: exit status {result.returncode}; output: {output}"
            )

    def add(self, route: Route) -> None:
        """Install a route with its ``add`` program."""
        self._do_op("add", route)

    def set(self, route: Route) -> None:
        """Update a route with its ``set`` program."""
        self._do_op("set", route)

    def remove(self, route: Route) -> None:
        """Delete a route with its ``remove`` program."""
        self._do_op("remove", route)

    def list(self) -> list[Route]:
        """Collect the valid routes reported by every ``list`` program.

        Programs that are missing, fail or print something other than a JSON
        array are skipped, as are entries that do not form a valid route.
        """
        routes: list[Route] = []
        for proto, cls in _LIST_TYPES:
            try:
                result = subprocess.run(
                    [f"list_ipv4_{proto}_route"],
                    stdout=subprocess.PIPE,
                    check=True,
                )
                entries = json.loads(result.stdout) or []
            except (OSError, subprocess.CalledProcessError, ValueError):
                continue
            if not isinstance(entries, list):
                continue
            for entry in entries:
                try:
                    route = cls.from_dict(entry or {})
                    route.validate()
                except RouteError:
                    continue
                routes.append(route)
        return routes

    def sync(self, routes: Iterable[Route]) -> None:
        """Validate every route, then feed each protocol's routes as JSON to its ``sync`` program."""
        grouped: dict[str, list[Route]] = {}
        for route in routes:
            route.validate()
            grouped.setdefault(route.proto, []).append(route)

        for proto, members in grouped.items():
            payload = json.dumps([r.to_dict() for r in members], separators=(",", ":"))
            program = f"sync_ipv4_{proto}_route"
            try:
                result = subprocess.run(
                    [program],
                    input=payload.encode(),
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    check=False,
                )
            except OSError as exc:
                raise RouteCommandError(f"exec failed: {exc}") from exc
            if result.returncode != 0:
                raise RouteCommandError(f"{program}: exit status {result.returncode}")