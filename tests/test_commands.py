import os
import subprocess

import pytest

from flyos.commands import EnvCommand, ExitCommand, FileCommand, HelpCommand, ListCommand
from flyos.desc import DescManager
from flyos.shell import Shell

DESC_TOML = """
[net.ping]
desc = "send echo requests"
usage = "ping HOST"

[net.trace]
desc = "trace a path"

[disk.df]
desc = "show free space"
"""


def _script(path, body):
    path.write_text(body)
    os.chmod(path, 0o755)
    return path


def _help_setup(tmp_path, capsys, toml=DESC_TOML):
    shell = Shell({})
    descs = DescManager()
    desc_file = tmp_path / "desc.toml"
    desc_file.write_text(toml)
    descs.load(desc_file)
    for command in (EnvCommand(), ExitCommand(), ListCommand()):
        shell.register(command)
    help_command = HelpCommand(descs, shell)
    shell.register(help_command)
    capsys.readouterr()
    return help_command


def test_exit_prints_goodbye(capsys):
    ExitCommand().execute(["exit"], {})
    assert capsys.readouterr().out == "👋 Bye!\n"


def test_list_command_is_builtin_and_silent(capsys):
    command = ListCommand()
    command.execute(["list"], {})
    assert capsys.readouterr().out == ""
    assert command.is_builtin
    assert command.name == "list"
    assert command.category == "sys"


def test_env_filters_named_variables(capsys):
    env = {"FLYOS_TEST_A": "1", "FLYOS_TEST_B": "2"}
    EnvCommand().execute(["env", "FLYOS_TEST_A"], env)
    assert capsys.readouterr().out.splitlines() == ["FLYOS_TEST_A=1"]


def test_env_without_arguments_ends_with_custom_entries(capsys):
    env = {"FLYOS_TEST_A": "1", "FLYOS_TEST_B": "2"}
    EnvCommand().execute(["env"], env)
    lines = capsys.readouterr().out.splitlines()
    assert lines[-2:] == ["FLYOS_TEST_A=1", "FLYOS_TEST_B=2"]


def test_file_command_passes_arguments_and_environment(tmp_path):
    script = _script(tmp_path / "writer", '#!/bin/sh\nprintf \'%s\' "$FOO" > "$1"\n')
    out_file = tmp_path / "out.txt"
    command = FileCommand("writer", str(script))
    command.execute(["writer", str(out_file)], {"FOO": "hello"})
    assert out_file.read_text() == "hello"
    assert not command.is_builtin
    assert command.category == "default"


def test_file_command_failure_raises(tmp_path):
    script = _script(tmp_path / "fail", "#!/bin/sh\nexit 3\n")
    with pytest.raises(subprocess.CalledProcessError) as info:
        FileCommand("fail", str(script)).execute(["fail"], {})
    assert info.value.returncode == 3


def test_file_command_missing_program_raises(tmp_path):
    with pytest.raises(OSError):
        FileCommand("ghost", str(tmp_path / "ghost")).execute(["ghost"], {})


def test_help_overview_lists_builtins_and_sorted_categories(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help"], {})
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0] == "🛠️  内置命令:"
    assert any(line.startswith("  env") and line.endswith("- 打印环境变量") for line in lines)
    assert "🗂  外部命令分类:" in out
    assert out.index("  disk") < out.index("  net")
    assert out.index("  env") < out.index("  exit") < out.index("  help")


def test_help_overview_without_external_commands(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys, toml="")
    help_command.execute(["help"], {})
    assert "⚠️ 暂无外部命令" in capsys.readouterr().out


def test_help_for_builtin_command(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help", "env"], {})
    out = capsys.readouterr().out
    assert "📄  Command:  env" in out
    assert "env [VAR...]" in out


def test_help_for_external_command(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help", "ping"], {})
    out = capsys.readouterr().out
    assert "📄 Command:  ping" in out
    assert "ping HOST" in out


def test_help_for_category_is_case_insensitive(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help", "NET"], {})
    out = capsys.readouterr().out
    assert "🗂  分类: net" in out
    assert "send echo requests" in out
    assert "trace a path" in out
    assert "show free space" not in out


def test_help_searches_descriptions(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help", "PATH"], {})
    out = capsys.readouterr().out
    assert "trace" in out
    assert "ping" not in out
    assert "💡 使用 `help [命令名]` 查看详细帮助" in out


def test_help_reports_no_match(tmp_path, capsys):
    help_command = _help_setup(tmp_path, capsys)
    help_command.execute(["help", "zzz"], {})
    assert capsys.readouterr().out == "⚠️ 未找到与 'zzz' 相关的命令\n"