from __future__ import annotations

import logging

from ucontrol.shell import (
    EXIT_NOT_FOUND,
    EXIT_TIMEOUT,
    REDACTED,
    ShellRunner,
)


def test_run_captures_stdout_lines() -> None:
    result = ShellRunner().run("printf", ["one\\ntwo\\n"])

    assert result.ok
    assert result.stdout_lines == ["one", "two"]


def test_arguments_are_not_interpreted_by_a_shell() -> None:
    result = ShellRunner().run("echo", ["$HOME; echo injected"])

    assert result.stdout_lines == ["$HOME; echo injected"]


def test_non_zero_exit_keeps_stdout() -> None:
    result = ShellRunner().run("sh", ["-c", "echo partial; exit 3"])

    assert result.exit_code == 3
    assert not result.ok
    assert result.stdout_lines == ["partial"]


def test_missing_program_reports_127() -> None:
    result = ShellRunner().run("definitely-not-a-real-program-xyz")

    assert result.exit_code == EXIT_NOT_FOUND
    assert result.stdout_lines == []


def test_timeout_reports_124() -> None:
    result = ShellRunner(timeout=0.2).run("sleep", ["5"])

    assert result.exit_code == EXIT_TIMEOUT


def test_run_discard_returns_exit_code() -> None:
    assert ShellRunner().run_discard("sh", ["-c", "exit 5"]) == 5


def test_run_shell_uses_the_shell() -> None:
    result = ShellRunner().run_shell("echo a && echo b")

    assert result.stdout_lines == ["a", "b"]


def test_undecodable_output_is_replaced_not_raised() -> None:
    result = ShellRunner().run("sh", ["-c", "printf '*:Caf\\351:80:WPA2\\n:Guest:40:--\\n'"])

    assert result.ok
    assert len(result.stdout_lines) == 2
    assert result.stdout_lines[0] == "*:Caf\ufffd:80:WPA2"
    assert result.stdout_lines[1] == ":Guest:40:--"


def test_passphrases_are_masked_in_logs(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="ucontrol.shell"):
        ShellRunner().run("true", ["con", "modify", "NewNet", "wifi-sec.psk", "hunter2"])
        ShellRunner().run("false", ["dev", "wifi", "connect", "NewNet", "password", "s3cret"])

    assert "NewNet" in caplog.text
    assert "exited with 1" in caplog.text
    assert "hunter2" not in caplog.text
    assert "s3cret" not in caplog.text
    assert REDACTED in caplog.text
