from __future__ import annotations

import subprocess  # noqa: S404
from pathlib import Path
from typing import TYPE_CHECKING

from llmctx.exceptions import FileUnreadableError, InvalidEncodingError, NotAGitRepositoryError
from llmctx.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence


def read_file_content(path: Path) -> str:
    """Read a whole file as strict UTF-8 text.

    Args:
        path (Path): the file to read

    Raises:
        FileUnreadableError: if the file cannot be opened or read.
        InvalidEncodingError: if the content is not valid UTF-8.

    Returns:
        str: the decoded content, untrimmed
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileUnreadableError(path=path, reason=e.strerror or str(e)) from e
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(path=path, reason=f"invalid byte at offset {e.start}") from e


def git_toplevel(cwd: Path | None = None) -> Path:
    """Get the top-level directory of the git checkout containing `cwd`.

    Args:
        cwd (Path | None): directory to run git from; the process cwd if None

    Raises:
        NotAGitRepositoryError: if git is unavailable or `cwd` is not in a checkout.

    Returns:
        Path: the checkout's top-level directory
    """
    folder = cwd or Path.cwd()
    try:
        out = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],  # noqa: S607
            cwd=str(folder),
            text=True,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        raise NotAGitRepositoryError(folder=folder) from e
    top = out.stdout.strip()
    if not top:
        raise NotAGitRepositoryError(folder=folder)
    return Path(top)


def resolve_roots(paths: Sequence[str | Path]) -> list[Path]:
    """Turn caller-supplied paths into walk roots.

    Explicit paths are kept in order. With none, the enclosing git checkout
    is used, falling back to the current directory.

    Args:
        paths (Sequence[str | Path]): paths given by the caller, possibly empty

    Returns:
        list[Path]: at least one root
    """
    if paths:
        return [Path(p) for p in paths]
    try:
        return [git_toplevel()]
    except NotAGitRepositoryError as e:
        logger.info("no git checkout found, using current directory: %s", e)
        return [Path()]
