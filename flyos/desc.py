"""Command descriptions loaded from desc.toml, and help printing."""

from __future__ import annotations

import os
import threading
import tomllib
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _texts(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be an array of strings")
    return list(value)


@dataclass
class CommandDesc:
    """Help text for one external command."""

    desc: str = ""
    usage: str = ""
    args: list[str] = field(default_factory=list)
    subcommands: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    returns: list[str] = field(default_factory=list)
    category: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], category: str = "") -> CommandDesc:
        """Build a description from a TOML table; unknown keys are ignored."""
        return cls(
            desc=_text(data, "desc"),
            usage=_text(data, "usage"),
            args=_texts(data, "args"),
            subcommands=_texts(data, "subcommands"),
            flags=_texts(data, "flags"),
            returns=_texts(data, "returns"),
            category=category,
        )


def _find_commands(
    table: Mapping[str, Any], prefix: tuple[str, ...]
) -> Iterator[tuple[tuple[str, ...], Mapping[str, Any]]]:
    for key, node in table.items():
        if not isinstance(node, Mapping):
            continue
        path = (*prefix, key)
        if "desc" in node:
            yield path, node
        else:
            yield from _find_commands(node, path)


def _print_sections(
    flags: Iterable[str] | None,
    subcommands: Iterable[str] | None,
    args: Iterable[str] | None,
    returns: Iterable[str] | None,
) -> None:
    sections = (
        ("🏷️  Flags:", flags),
        ("🧩  Subcommands:", subcommands),
        ("📥  Args:", args),
        ("📤  Returns:", returns),
    )
    for title, values in sections:
        values = list(values or ())
        if values:
            print(title)
            for value in values:
                print("      " + value)


class DescManager:
    """Holds command descriptions grouped by category.

    A TOML table holding a ``desc`` key describes a command; its first path
    component is the category and the rest, joined by dots, is the name.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._descs: dict[str, CommandDesc] = {}
        self._categories: dict[str, list[str]] = {}

    def load(self, path: str | os.PathLike[str]) -> None:
        """Replace the descriptions with those in the TOML file at ``path``."""
        with open(path, "rb") as fh:
            raw_bytes = fh.read()
        try:
            raw = tomllib.loads(raw_bytes.decode("utf-8"))
        except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ValueError(f"❌ 解析 desc.toml 失败: {exc}") from exc

        descs: dict[str, CommandDesc] = {}
        categories: dict[str, list[str]] = {}
        for full_name, node in _find_commands(raw, ()):
            category, name = full_name[0], ".".join(full_name[1:])
            try:
                desc = CommandDesc.from_mapping(node, category)
            except ValueError as exc:
                print(f"❌ 解析命令 {'.'.join(full_name)} 失败: {exc}")
                continue
            descs[name] = desc
            categories.setdefault(category, []).append(name)

        with self._lock:
            self._descs = descs
            self._categories = categories
        print(f"📄 desc.toml 已加载，共 {len(descs)} 条📄命令，{len(categories)} 个🗂分类")

    def get(self, name: str) -> CommandDesc | None:
        """Return the description of ``name``, or None if there is none."""
        with self._lock:
            return self._descs.get(name)

    def categories(self) -> list[str]:
        """Return the names of all categories."""
        with self._lock:
            return list(self._categories)

    def commands_in(self, category: str) -> list[str]:
        """Return the command names of ``category`` in load order."""
        with self._lock:
            return list(self._categories.get(category, ()))

    def items(self) -> list[tuple[str, CommandDesc]]:
        """Return every (name, description) pair."""
        with self._lock:
            return list(self._descs.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._descs)

    def print_help(self, name: str, shell: Any) -> None:
        """Print detailed help for a builtin command of ``shell`` or a described command."""
        command = shell.get(name)
        if command is not None and command.is_builtin:
            print(f"📄  Command:  {command.name:<5}")
            print(f"🗂   Category: {command.category:<5}")
            print(f"📌  Usage:\n      {command.usage}")
            _print_sections(command.flags, command.subcommands, command.args, command.returns)
            return

        desc = self.get(name)
        if desc is None:
            print(f"⚠️ 未找到命令 {name}")
            return

        print(f"📄 Command:  {name:<5}")
        print(f"🗂  Category: {desc.category:<5}")
        print(f"📌  Usage:\n      {desc.usage}")
        _print_sections(desc.flags, desc.subcommands, desc.args, desc.returns)