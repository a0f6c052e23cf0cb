"""Shell commands: external programs and the builtin commands."""

from __future__ import annotations

import abc
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flyos.config import merge_env
from flyos.desc import DescManager

if TYPE_CHECKING:
    from flyos.shell import Shell


def _environment(env: Mapping[str, str]) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in merge_env(env):
        key, sep, value = entry.partition("=")
        if sep:
            result[key] = value
    return result


class Command(abc.ABC):
    """A command the shell can run, with the help text describing it."""

    name: str = ""
    path: str = ""
    category: str = ""
    is_builtin: bool = True
    desc: str = ""
    usage: str = ""
    args: tuple[str, ...] = ()
    returns: tuple[str, ...] = ()
    flags: tuple[str, ...] = ()
    subcommands: tuple[str, ...] = ()

    @abc.abstractmethod
    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Run the command; ``args[0]`` is the command name."""


@dataclass
class FileCommand(Command):
    """An executable file found in one of the command directories."""

    name: str
    path: str
    category: str = "default"

    is_builtin = False

    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Run the program with the remaining arguments and the merged environment.

        Raises OSError if it cannot be started and CalledProcessError if it fails.
        """
        subprocess.run([self.path, *args[1:]], env=_environment(env), check=True)


class ListCommand(Command):
    """Lists every command; the REPL handles the listing itself."""

    name = "list"
    category = "sys"
    desc = "打印全部命令"
    usage = "exit"
    args = ("",)
    returns = ("展示所有命令！",)

    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Do nothing."""


class ExitCommand(Command):
    """Leaves the shell."""

    name = "exit"
    category = "sys"
    desc = "退出flyos环境"
    usage = "exit"
    args = ("[]",)
    returns = ("退出环境！",)

    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Say goodbye."""
        print("👋 Bye!")


class EnvCommand(Command):
    """Prints the environment, optionally only the named variables."""

    name = "env"
    category = "sys"
    desc = "打印环境变量"
    usage = "env [VAR...]"
    args = ("VAR 可选，需要打印的环境变量",)
    returns = ("打印环境变量内容",)

    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Print ``KEY=VALUE`` lines of the merged environment."""
        entries = merge_env(env)
        if len(args) <= 1:
            for entry in entries:
                print(entry)
            return
        wanted = set(args[1:])
        for entry in entries:
            key, sep, _ = entry.partition("=")
            if sep and key in wanted:
                print(entry)


class HelpCommand(Command):
    """Shows help for a command or category, or searches descriptions."""

    name = "help"
    category = "sys"
    desc = "🔍 显示命令或分类的帮助信息（支持模糊搜索）"
    usage = "help [COMMAND|CATEGORY|KEYWORD]"
    args = ("命令名、分类名或关键字（可选）",)
    returns = ("打印帮助信息",)

    def __init__(self, desc_manager: DescManager, shell: Shell) -> None:
        self._descs = desc_manager
        self._shell = shell

    def execute(self, args: Sequence[str], env: Mapping[str, str]) -> None:
        """Print an overview, or help matching ``args[1]``."""
        if len(args) < 2:
            self._print_overview()
            return

        target = args[1]
        command = self._shell.get(target)
        if (command is not None and command.is_builtin) or self._descs.get(target) is not None:
            self._descs.print_help(target, self._shell)
            return

        folded = target.casefold()
        for category in self._descs.categories():
            if category.casefold() == folded:
                print(f"🗂  分类: {category}\n")
                for name in self._descs.commands_in(category):
                    desc = self._descs.get(name)
                    if desc is not None:
                        print(f"  {name:<20} - {desc.desc}")
                return

        keyword = target.lower()
        matches = [
            name
            for name, desc in self._descs.items()
            if keyword in name.lower() or keyword in desc.desc.lower()
        ]
        if not matches:
            print(f"⚠️ 未找到与 '{target}' 相关的命令")
            return

        print(f"\n🔍 匹配到 {len(matches)} 个命令:")
        for name in matches:
            command = self._shell.get(name)
            if command is not None:
                print(f"  {command.name:<20} - {command.desc}")
            else:
                desc = self._descs.get(name)
                if desc is not None:
                    print(f"  {name:<20} - {desc.desc}")
        print("\n💡 使用 `help [命令名]` 查看详细帮助")

    def _print_overview(self) -> None:
        print("🛠️  内置命令:")
        builtins = sorted(
            (c for c in self._shell.commands().values() if c.is_builtin),
            key=lambda c: c.name,
        )
        for command in builtins:
            print(f"  {command.name:<10} - {command.desc}")
        print()

        categories = sorted(self._descs.categories())
        if categories:
            print("🗂  外部命令分类:")
            for category in categories:
                print("  " + category)
            print("\n💡 使用 `help [分类名]` 查看分类内命令")
        else:
            print("⚠️ 暂无外部命令")