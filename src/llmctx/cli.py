"""
llmctx - Assemble a size-bounded snapshot of a source tree for an LLM.

Overview
--------
Every eligible file under the given paths is printed as a `path:` header
followed by a fenced block of its trimmed content, until the token budget is
spent. Hidden entries, lock files, license files, `node_modules` and
`.gitignore`d paths are left out; `--exclude` adds substring or glob patterns.

A file that does not fit the remaining budget is skipped and the walk goes
on; once the budget is fully consumed the walk stops.

Usage
-----
    - Current git checkout to stdout:
        llmctx
    - Two directories, 20k tokens, to the clipboard:
        llmctx --max-tokens 20000 --copy src tests
    - Skip test files and append the output of the build:
        llmctx --exclude test --debug
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from llmctx import __version__
from llmctx.assembler import ContextAssembler
from llmctx.budget import BudgetLedger
from llmctx.clipboard import copy_to_clipboard
from llmctx.commands import command_section
from llmctx.exceptions import ConfigError, LlmctxError
from llmctx.file_manipulation import resolve_roots
from llmctx.ignore_policy import IgnorePolicy
from llmctx.logging import logger, setup_logging
from llmctx.settings import Settings, load_settings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from llmctx.config import AssembledContext


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="llmctx",
        description="Print files and directories as fenced blocks for an LLM, within a token budget.",
    )
    p.add_argument("paths", nargs="*", help="Files or directories (default: git root, else .).")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--max-tokens", metavar="NUM", default=None, help="Maximum number of tokens.")
    p.add_argument(
        "--chars-per-token",
        metavar="N",
        type=int,
        default=None,
        help="Characters counted per token.",
    )
    p.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=None,
        help="Exclude entries whose name contains this text or matches this glob (repeatable).",
    )
    p.add_argument(
        "--no-gitignore",
        dest="gitignore",
        action="store_false",
        default=None,
        help="Do not honor .gitignore files.",
    )
    p.add_argument("-c", "--copy", action="store_true", help="Copy output to clipboard.")
    p.add_argument("-d", "--debug", action="store_true", help="Append the build command output.")
    p.add_argument("-t", "--test", action="store_true", help="Append the test command output.")
    p.add_argument("--debug-command", default=None, help="Build command for --debug.")
    p.add_argument("--test-command", default=None, help="Test command for --test.")
    p.add_argument("--config", type=Path, default=None, help="YAML configuration file.")
    p.add_argument("--log-file", default=None, help="Log file path.")
    p.add_argument("--log-level", default=None, help="Minimum log level (default WARNING).")
    p.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line and merge it with the other configuration layers."""
    args = build_parser().parse_args(argv)
    log_level = args.log_level
    if log_level is None and args.verbose:
        log_level = "INFO"
    cli_values = {
        "paths": [Path(p) for p in args.paths],
        "max_tokens": args.max_tokens,
        "chars_per_token": args.chars_per_token,
        "exclude": args.exclude,
        "gitignore": args.gitignore,
        "copy_to_clipboard": args.copy,
        "debug": args.debug,
        "test": args.test,
        "debug_command": args.debug_command,
        "test_command": args.test_command,
        "log_file": args.log_file,
        "log_level": log_level,
    }
    return load_settings(cli_values, config_path=args.config)


def build_context(settings: Settings) -> AssembledContext:
    """Run the assembler for `settings`, with command sections when requested."""
    roots = resolve_roots(settings.paths)
    assembler = ContextAssembler(
        BudgetLedger(settings.max_units),
        IgnorePolicy(settings.exclude),
        use_gitignore=settings.gitignore,
    )
    # commands run in the checkout that was resolved when no paths were given
    cwd = None if settings.paths else roots[0]
    augmentations = []
    if settings.debug:
        augmentations.append(command_section(settings.debug_command, "Build", cwd=cwd))
    if settings.test:
        augmentations.append(command_section(settings.test_command, "Test", cwd=cwd))
    return assembler.assemble(roots, augmentations)


def deliver(context: AssembledContext, settings: Settings) -> None:
    if settings.copy_to_clipboard:
        copy_to_clipboard(context.text)
        logger.info("copied %d characters to the clipboard", len(context.text))
    else:
        print(context.text)


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
        try:
            setup_logging(settings.log_file or None, settings.log_level)
        except OSError as e:
            raise ConfigError(source=f"--log-file {settings.log_file}", reason=e.strerror or str(e)) from e
        context = build_context(settings)
        deliver(context, settings)
    except LlmctxError as e:
        print(f"llmctx: error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
