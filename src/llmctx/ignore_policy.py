"""Fixed and caller-supplied exclusion rules.

The policy is a pure predicate over a path: it never touches the filesystem,
so it can be tested with paths that do not exist.
"""

from __future__ import annotations

import fnmatch
from typing import TYPE_CHECKING

from llmctx.config import GLOB_CHARS, LICENSE_NAMES, LOCK_MANIFESTS, VENDOR_DIRS, CandidateEntry

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


def normalize_patterns(patterns: Iterable[str]) -> tuple[str, ...]:
    """Strip exclude patterns and drop blank ones, preserving order.

    Args:
        patterns (Iterable[str]): raw patterns as supplied by the caller

    Returns:
        tuple[str, ...]: the usable patterns, with POSIX separators
    """
    out: list[str] = []
    for p in patterns:
        p2 = (p or "").strip()
        if not p2:
            continue
        out.append(p2.replace("\\", "/"))
    return tuple(out)


def is_undecodable(name: str) -> bool:
    """Check whether a file name carries bytes that are not valid UTF-8.

    `os` decodes such bytes into lone surrogates, which cannot be re-encoded.
    """
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return True
    return False


def matches_fixed_rules(path: Path) -> bool:
    """Check a path against the exclusions that apply to every run.

    Args:
        path (Path): the path to check

    Returns:
        bool: True if the path is hidden, a lock file, a lock manifest,
            a license file, or lives under a vendored dependency directory
    """
    name = path.name
    if name.startswith(".") or name.endswith(".lock"):
        return True
    if name in LOCK_MANIFESTS or name in LICENSE_NAMES:
        return True
    return any(part in VENDOR_DIRS for part in path.parts)


def matches_pattern(path: Path, pattern: str) -> bool:
    """Check a single caller-supplied exclude pattern.

    Plain patterns are case-sensitive substrings of the base name; patterns
    with a `/` are matched against the whole POSIX path; patterns with glob
    characters use `fnmatch` semantics.
    """
    posix = path.as_posix()
    scoped = "/" in pattern
    if GLOB_CHARS.intersection(pattern):
        if scoped:
            return fnmatch.fnmatchcase(posix, pattern) or fnmatch.fnmatchcase(posix, f"*/{pattern}")
        return fnmatch.fnmatchcase(path.name, pattern)
    if scoped:
        return pattern in posix
    return pattern in path.name


class IgnorePolicy:
    """Decide whether a candidate entry is eligible for inclusion."""

    def __init__(self, exclude_patterns: Iterable[str] = ()) -> None:
        self.exclude_patterns = normalize_patterns(exclude_patterns)

    def __repr__(self) -> str:
        return f"IgnorePolicy(exclude_patterns={list(self.exclude_patterns)!r})"

    def should_skip(self, entry: CandidateEntry | Path, rel_path: Path | None = None) -> bool:
        """Return True if the entry must not be included.

        Directory-scoped rules only see the part of the path below the walk
        root, so an explicit root inside `node_modules/` or an excluded
        directory keeps its files.

        Args:
            entry (CandidateEntry | Path): the entry (or bare path) to classify
            rel_path (Path | None): path below the walk root; taken from the
                entry, or the whole path when unknown

        Returns:
            bool: True when any fixed rule or exclude pattern matches
        """
        if isinstance(entry, CandidateEntry):
            path = entry.path
            rel_path = rel_path or entry.rel_path
        else:
            path = entry
        scoped = rel_path or path
        if not path.name:
            # `.` or a filesystem root: nothing to classify
            return False
        if is_undecodable(str(scoped)):
            return True
        if matches_fixed_rules(scoped):
            return True
        return any(matches_pattern(scoped, p) for p in self.exclude_patterns)
