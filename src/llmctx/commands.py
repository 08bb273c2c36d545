"""Capture the output of external build and test commands."""

from __future__ import annotations

import shlex
import subprocess  # noqa: S404
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from llmctx.config import Section
from llmctx.exceptions import CommandError
from llmctx.logging import logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class CommandOutput(BaseModel):
    """Captured result of one external command."""

    model_config = ConfigDict(frozen=True)

    command: str = Field(..., description="Command line as configured")
    returncode: int = Field(..., description="Exit status")
    stdout: str = Field("", description="Captured standard output")
    stderr: str = Field("", description="Captured standard error")


def run_command(command: str, cwd: Path | None = None) -> CommandOutput:
    """Run `command` to completion and capture both output streams.

    There is no timeout: a hanging command hangs the run. A non-zero exit
    status is not an error, since failing builds are worth capturing.

    Args:
        command (str): shell-like command line, split with `shlex`
        cwd (Path | None): working directory for the command

    Raises:
        CommandError: if the command line is empty or cannot be started.

    Returns:
        CommandOutput: exit status and decoded output
    """
    argv = shlex.split(command)
    if not argv:
        raise CommandError(command=command, reason="empty command")
    logger.info("running %s", command)
    try:
        proc = subprocess.run(  # noqa: S603
            argv,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            check=False,
        )
    except OSError as e:
        raise CommandError(command=command, reason=e.strerror or str(e)) from e
    if proc.returncode:
        logger.info("%s exited with status %d", command, proc.returncode)
    return CommandOutput(
        command=command,
        returncode=proc.returncode,
        stdout=proc.stdout.decode("utf-8", errors="replace"),
        stderr=proc.stderr.decode("utf-8", errors="replace"),
    )


def render_command_output(output: CommandOutput, kind: str) -> str:
    """Render captured streams as `<kind> Output:` / `<kind> Errors:` paragraphs."""
    return f"{kind} Output:\n{output.stdout}\n{kind} Errors:\n{output.stderr}\n"


def command_section(command: str, kind: str, cwd: Path | None = None) -> Callable[[], Section]:
    """Build an augmentation that runs `command` and returns its output as a section.

    Args:
        command (str): the command line to run
        kind (str): stream title prefix, e.g. "Build" or "Test"
        cwd (Path | None): working directory for the command

    Returns:
        Callable[[], Section]: the deferred section producer
    """

    def produce() -> Section:
        output = run_command(command, cwd=cwd)
        return Section(label=command, body=render_command_output(output, kind))

    return produce
