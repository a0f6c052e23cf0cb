"""The command shell: registered commands, listing, lookup and loading."""

from __future__ import annotations

import os
import stat
import threading
from collections.abc import Iterator, Mapping, Sequence

from flyos.commands import Command, FileCommand
from flyos.config import Config
from flyos.desc import DescManager

_WINDOWS_EXTENSIONS = frozenset(
    {".exe", ".bat", ".cmd", ".com", ".ps1", ".vbs", ".js", ".sh", ".py", ".pl"}
)
_NO_DESC = "<暂无描述>"


def is_executable(path: str | os.PathLike[str]) -> bool:
    """Tell whether ``path`` is a regular file the shell may run."""
    try:
        info = os.stat(path)
    except OSError:
        return False
    if not stat.S_ISREG(info.st_mode):
        return False
    if os.name != "nt":
        if info.st_mode & 0o111:
            return True
        try:
            with open(path, "rb") as fh:
                return fh.read(2) == b"#!"
        except OSError:
            return False
    return os.path.splitext(os.fspath(path))[1].lower() in _WINDOWS_EXTENSIONS


def _walk_files(path: str) -> Iterator[str]:
    """Yield non-directory paths under ``path`` in lexical order, without following links."""
    if not stat.S_ISDIR(os.lstat(path).st_mode):
        yield path
        return
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(entry.path)
        else:
            yield entry.path


def _grouped(commands: Sequence[Command]) -> dict[str, list[Command]]:
    groups: dict[str, list[Command]] = {}
    for command in commands:
        groups.setdefault(command.category, []).append(command)
    for members in groups.values():
        members.sort(key=lambda c: c.name)
    return dict(sorted(groups.items()))


class Shell:
    """Holds the registered commands and the environment they run with."""

    def __init__(self, env: dict[str, str] | None = None) -> None:
        self._lock = threading.RLock()
        self._commands: dict[str, Command] = {}
        self.env: dict[str, str] = {} if env is None else env

    def register(self, command: Command) -> None:
        """Add ``command``, replacing any command of the same name."""
        with self._lock:
            self._commands[command.name] = command

    def get(self, name: str) -> Command | None:
        """Return the command called ``name``, or None."""
        with self._lock:
            return self._commands.get(name)

    def commands(self) -> dict[str, Command]:
        """Return a snapshot of the commands by name."""
        with self._lock:
            return dict(self._commands)

    def list(self) -> None:
        """Print builtin and external commands grouped by category."""
        with self._lock:
            everything = list(self._commands.values())
        builtins = _grouped([c for c in everything if c.is_builtin])
        externals = _grouped([c for c in everything if not c.is_builtin])

        print("🛠️ 内置命令:")
        if not builtins:
            print("  <无>")
        for category, members in builtins.items():
            print("🗂 分类:")
            print(f"\n[{category}]")
            for command in members:
                print(f"  {command.name:<10} - {command.desc or _NO_DESC}")

        print("\n📦 外部命令:")
        if not externals:
            print("  <无>")
            return
        print("🗂 分类:")
        for category, members in externals.items():
            print(f"\n[{category}]")
            for command in members:
                print(f"  {command.name:<10} → {command.path:<20} {command.desc or _NO_DESC}")

    def run_command(self, args: Sequence[str]) -> None:
        """Run ``args[0]`` with ``args``, reporting unknown commands and failures."""
        if not args:
            return
        command = self.get(args[0])
        if command is None:
            print(f"⚠️ 未找到命令: {args[0]}")
            return
        try:
            command.execute(list(args), self.env)
        except Exception as exc:
            print(f"💥 执行失败 [{args[0]}]: {exc}")

    def fuzzy_find(self, keyword: str) -> list[Command]:
        """Return commands whose name or description contains ``keyword``, by name."""
        needle = keyword.lower()
        with self._lock:
            found = [
                command
                for name, command in self._commands.items()
                if needle in name.lower() or needle in command.desc.lower()
            ]
        return sorted(found, key=lambda c: c.name)

    def load_commands(self, config: Config, desc_manager: DescManager) -> int:
        """Register every executable under the configured directories; return how many."""
        excluded = set(config.excludes)
        loaded: dict[str, Command] = {}
        for directory in config.commands_dirs:
            try:
                for path in _walk_files(directory):
                    name = os.path.basename(path)
                    if name in excluded or not is_executable(path):
                        continue
                    desc = desc_manager.get(name)
                    category = desc.category if desc is not None else "default"
                    loaded[name] = FileCommand(name=name, path=path, category=category)
            except OSError:
                continue

        with self._lock:
            self._commands.update(loaded)
        print(f"🔄 已加载 {len(loaded)} 个📦外部命令")
        return len(loaded)


def _as_env(mapping: Mapping[str, str]) -> dict[str, str]:
    return dict(mapping)