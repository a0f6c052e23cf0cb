"""Interactive entry point: configuration watching and the read-eval-print loop."""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
import threading
from collections.abc import Callable, Iterator
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from flyos.commands import EnvCommand, ExitCommand, HelpCommand, ListCommand
from flyos.config import flyos_home, parse_config
from flyos.desc import DescManager
from flyos.shell import Shell

CONFIG_NAME = "config.toml"
DESC_NAME = "desc.toml"
HISTORY_FILE = "/tmp/flyos_history"
PROMPT = "flyos> "


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, notify: Callable[[str], None]) -> None:
        super().__init__()
        self._notify = notify

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._notify(os.path.basename(os.fsdecode(event.src_path)))


class ConfigWatcher:
    """Calls back, debounced, when config.toml or desc.toml in a directory is written."""

    def __init__(
        self,
        directory: str | os.PathLike[str],
        on_config: Callable[[], None],
        on_desc: Callable[[], None],
        delay: float = 0.3,
    ) -> None:
        self._directory = os.fspath(directory)
        self._callbacks = {CONFIG_NAME: on_config, DESC_NAME: on_desc}
        self._delay = delay
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._observer: Observer | None = None

    def _changed(self, name: str) -> None:
        callback = self._callbacks.get(name)
        if callback is None:
            return
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._delay, callback)
            self._timer.daemon = True
            self._timer.start()

    def start(self) -> None:
        """Begin watching; a directory that cannot be watched is silently ignored."""
        observer = Observer()
        try:
            observer.schedule(_ChangeHandler(self._changed), self._directory, recursive=False)
            observer.start()
        except OSError:
            return
        self._observer = observer

    def stop(self) -> None:
        """Stop watching and drop any pending reload."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def __enter__(self) -> ConfigWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class Repl:
    """Reads command lines and runs them in the shell until exit or end of input."""

    def __init__(
        self,
        shell: Shell,
        desc: DescManager,
        *,
        input_func: Callable[[str], str] | None = None,
        history_file: str | None = None,
    ) -> None:
        self.shell = shell
        self.desc = desc
        self._input = input_func or input
        self._use_readline = input_func is None and history_file is not None
        self._history_file = history_file

    @contextlib.contextmanager
    def _history(self) -> Iterator[None]:
        if not (self._use_readline and sys.stdin.isatty()):
            yield
            return
        try:
            import readline
        except ImportError:
            yield
            return
        with contextlib.suppress(OSError):
            readline.read_history_file(self._history_file)
        try:
            yield
        finally:
            with contextlib.suppress(OSError):
                readline.write_history_file(self._history_file)

    def loop(self) -> None:
        """Run until ``exit``, end of input or an interrupt."""
        with self._history():
            while True:
                try:
                    line = self._input(PROMPT)
                except (EOFError, KeyboardInterrupt):
                    return
                args = line.split()
                if not args:
                    continue
                if args[0] == "exit":
                    print("👋 Bye!")
                    return
                if args[0] == "list":
                    self.shell.list()
                else:
                    self.shell.run_command(args)


def main(argv: list[str] | None = None) -> int:
    """Start the interactive shell configured from ``$FLYOS_HOME/.flyos``."""
    parser = argparse.ArgumentParser(prog="flyos", description="Interactive FlyOS command shell.")
    parser.parse_args(argv)

    flyos_dir = Path(flyos_home()) / ".flyos"
    cfg_path = flyos_dir / CONFIG_NAME
    desc_path = flyos_dir / DESC_NAME

    try:
        config = parse_config(cfg_path)
    except (OSError, ValueError) as exc:
        print(f"❌ 启动失败: {exc}")
        return 1
    try:
        flyos_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as exc:
        print(f"创建配置目录失败: {exc}")
        return 1

    shell = Shell(config.normalize_env())
    shell.env["USER"] = "fly"
    shell.env["VERSION"] = "1.0.0"
    shell.register(EnvCommand())
    shell.register(ExitCommand())
    shell.register(ListCommand())

    desc = DescManager()
    with contextlib.suppress(OSError, ValueError):
        desc.load(desc_path)

    shell.register(HelpCommand(desc, shell))
    shell.load_commands(config, desc)

    def reload_config() -> None:
        try:
            new_config = parse_config(cfg_path)
        except (OSError, ValueError) as exc:
            print("❌ reload config failed:", exc)
            return
        shell.load_commands(new_config, desc)

    def reload_desc() -> None:
        with contextlib.suppress(OSError, ValueError):
            desc.load(desc_path)

    with ConfigWatcher(flyos_dir, reload_config, reload_desc):
        repl = Repl(shell, desc, history_file=HISTORY_FILE)
        print("🚀 FlyOS REPL 已启动！💡 输入 help 查看命令，输入 exit 安全退出 ")
        repl.loop()
    return 0