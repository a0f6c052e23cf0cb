"""Interfaces implemented by runtime modules and the objects they exchange."""

from __future__ import annotations

import abc
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

CommandHandler = Callable[[list[str]], None]
Spec = dict[str, Any]


class Module(abc.ABC):
    """Base of every module: a name, a category and a version."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Unique module name."""

    @property
    @abc.abstractmethod
    def category(self) -> str:
        """Broad area such as ``network``, ``security`` or ``policy``."""

    @property
    @abc.abstractmethod
    def version(self) -> str:
        """Module version, e.g. ``1.0``."""


class CommandRegistry(abc.ABC):
    """Something commands can be registered with."""

    @abc.abstractmethod
    def register(self, cmd: str, handler: CommandHandler) -> None:
        """Make ``handler`` answer ``cmd``."""


class CommandModule(Module):
    """A module that contributes commands."""

    @abc.abstractmethod
    def register_commands(self, registry: CommandRegistry) -> None:
        """Register this module's commands with ``registry``."""


class DaemonModule(Module):
    """A module that runs in the background until told to stop."""

    @abc.abstractmethod
    def start(self, stop_event: threading.Event) -> None:
        """Run until ``stop_event`` is set; raise on failure."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Release whatever the module holds."""


class StatefulModule(Module):
    """A module whose current state can be queried."""

    @abc.abstractmethod
    def get(self, name: str) -> Spec:
        """Return the state of one named object."""

    @abc.abstractmethod
    def list(self) -> list[Spec]:
        """Return the state of every object."""


@dataclass
class Event:
    """A system event delivered to event handlers."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """What an event handler asks the system to do in response."""

    block_ip: bool = False
    log: bool = False
    alert: bool = False
    message: str = ""


class EventHandler(abc.ABC):
    """Something that reacts to system events."""

    @abc.abstractmethod
    def on_event(self, event: Event) -> Action:
        """Handle ``event`` and say what should follow."""


class ModuleObject(abc.ABC):
    """A configuration object that knows how to apply itself."""

    @abc.abstractmethod
    def execute(self, verb: str) -> None:
        """Apply the object using ``verb`` (add, set, delete, ...)."""