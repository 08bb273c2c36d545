from __future__ import annotations

import shlex
import sys

import pytest
import pyperclip
from pytest_mock import MockerFixture

from llmctx import commands
from llmctx.clipboard import copy_to_clipboard
from llmctx.commands import CommandOutput, command_section, render_command_output, run_command
from llmctx.exceptions import ClipboardError, CommandError


def python_command(code: str) -> str:
    return shlex.join([sys.executable, "-c", code])


@pytest.mark.unit
def test_run_command_captures_both_streams() -> None:
    output = run_command(python_command("import sys; print('built'); sys.stderr.write('warning: unused')"))

    assert output.returncode == 0
    assert output.stdout.strip() == "built"
    assert output.stderr == "warning: unused"


@pytest.mark.unit
def test_failing_command_is_not_an_error() -> None:
    output = run_command(python_command("import sys; sys.stderr.write('error[E0425]'); sys.exit(101)"))

    assert output.returncode == 101
    assert "E0425" in output.stderr


@pytest.mark.unit
def test_missing_program_raises_command_error() -> None:
    with pytest.raises(CommandError, match="definitely-not-a-build-tool"):
        run_command("definitely-not-a-build-tool --release")


@pytest.mark.unit
def test_empty_command_raises_command_error() -> None:
    with pytest.raises(CommandError, match="empty command"):
        run_command("   ")


@pytest.mark.unit
def test_render_command_output_labels_streams() -> None:
    output = CommandOutput(command="cargo build", returncode=0, stdout="ok", stderr="")

    assert render_command_output(output, "Build") == "Build Output:\nok\nBuild Errors:\n\n"


@pytest.mark.unit
def test_command_section_defers_execution(mocker: MockerFixture) -> None:
    run = mocker.patch.object(
        commands,
        "run_command",
        return_value=CommandOutput(command="cargo test", returncode=0, stdout="2 passed", stderr=""),
    )

    produce = command_section("cargo test", "Test")
    run.assert_not_called()
    section = produce()

    assert section.label == "cargo test"
    assert section.body.startswith("Test Output:\n2 passed\n")
    run.assert_called_once_with("cargo test", cwd=None)


@pytest.mark.unit
def test_copy_to_clipboard_wraps_pyperclip_errors(mocker: MockerFixture) -> None:
    mocker.patch.object(pyperclip, "copy", side_effect=pyperclip.PyperclipException("no clipboard"))

    with pytest.raises(ClipboardError, match="no clipboard"):
        copy_to_clipboard("text")


@pytest.mark.unit
def test_copy_to_clipboard_delegates_to_pyperclip(mocker: MockerFixture) -> None:
    copy = mocker.patch.object(pyperclip, "copy")

    copy_to_clipboard("context")

    copy.assert_called_once_with("context")
