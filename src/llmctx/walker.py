"""Lazy depth-first traversal of walk roots."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from llmctx.config import CandidateEntry, EntryKind
from llmctx.exceptions import DirectoryUnreadableError, FileUnreadableError
from llmctx.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from llmctx.gitignore import IgnoreSource
    from llmctx.ignore_policy import IgnorePolicy


def list_directory(directory: Path) -> list[str]:
    """List the entry names of a directory in sorted order.

    The listing handle is closed before returning.

    Args:
        directory (Path): the directory to list

    Raises:
        DirectoryUnreadableError: if the directory cannot be opened or listed.

    Returns:
        list[str]: entry names, sorted by code point
    """
    try:
        with os.scandir(directory) as it:
            return sorted(entry.name for entry in it)
    except OSError as e:
        raise DirectoryUnreadableError(path=directory, reason=e.strerror or str(e)) from e


def stat_entry(path: Path) -> os.stat_result:
    """Stat an entry, following symlinks.

    Raises:
        FileUnreadableError: for broken symlinks or entries that vanished
            between listing and stat.
    """
    try:
        return path.stat()
    except OSError as e:
        raise FileUnreadableError(path=path, reason=e.strerror or str(e)) from e


class TreeWalker:
    """Produce candidate entries under one or more roots.

    One walker is meant to serve a whole run: it remembers the directories it
    entered and the files it yielded, so overlapping roots and symlink loops
    never produce a path twice.
    """

    def __init__(self, policy: IgnorePolicy) -> None:
        self.policy = policy
        self._visited_dirs: set[tuple[int, int]] = set()
        self._yielded_files: set[Path] = set()

    def walk(self, root: Path, ignore_source: IgnoreSource | None = None) -> Iterator[CandidateEntry]:
        """Yield the entries under `root`, depth-first, in name order.

        A root that is a file is yielded as is, leaving the policy decision to
        the caller. A root directory is neither yielded nor filtered. Below
        it, entries rejected by the policy or by `ignore_source` are dropped
        before being stat'ed, and rejected directories are never opened.
        Directories are yielded before their content.

        Args:
            root (Path): a file or directory to walk
            ignore_source (IgnoreSource | None): optional version-control rules

        Raises:
            DirectoryUnreadableError: if the root is missing or a directory cannot be listed.
            FileUnreadableError: if an entry cannot be stat'ed.

        Yields:
            CandidateEntry: the discovered files and directories
        """
        try:
            st = root.stat()
        except OSError as e:
            raise DirectoryUnreadableError(path=root, reason=e.strerror or str(e)) from e

        if stat.S_ISDIR(st.st_mode):
            if self._enter(root, st):
                yield from self._walk_directory(root, None, ignore_source)
        elif stat.S_ISREG(st.st_mode):
            if self._first_visit(root):
                yield CandidateEntry(path=root, kind=EntryKind.FILE, rel_path=Path(root.name))
        else:
            logger.warning("%s is neither a file nor a directory, skipped", root)

    def _enter(self, directory: Path, st: os.stat_result) -> bool:
        key = (st.st_dev, st.st_ino)
        if key in self._visited_dirs:
            logger.info("%s already visited, not re-entering", directory)
            return False
        self._visited_dirs.add(key)
        return True

    def _first_visit(self, file: Path) -> bool:
        resolved = file.resolve()
        if resolved in self._yielded_files:
            return False
        self._yielded_files.add(resolved)
        return True

    def _walk_directory(
        self,
        directory: Path,
        rel_dir: Path | None,
        ignore_source: IgnoreSource | None,
    ) -> Iterator[CandidateEntry]:
        for name in list_directory(directory):
            path = directory / name
            rel = Path(name) if rel_dir is None else rel_dir / name
            if self.policy.should_skip(path, rel):
                logger.debug("%s skipped by ignore policy", path)
                continue
            st = stat_entry(path)
            is_dir = stat.S_ISDIR(st.st_mode)
            if not is_dir and not stat.S_ISREG(st.st_mode):
                logger.debug("%s is not a regular file, skipped", path)
                continue
            if ignore_source is not None and ignore_source.is_ignored(path, is_dir=is_dir):
                logger.debug("%s pruned by ignore rules", path)
                continue

            if is_dir:
                if self._enter(path, st):
                    yield CandidateEntry(path=path, kind=EntryKind.DIRECTORY, rel_path=rel)
                    yield from self._walk_directory(path, rel, ignore_source)
            elif self._first_visit(path):
                yield CandidateEntry(path=path, kind=EntryKind.FILE, rel_path=rel)
