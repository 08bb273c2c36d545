"""Version-control ignore rules read from `.gitignore` files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pathspec import GitIgnoreSpec

from llmctx.exceptions import FileUnreadableError, InvalidEncodingError
from llmctx.logging import logger

GITIGNORE_FILE = ".gitignore"


class IgnoreSource(Protocol):
    """Anything able to tell whether a path is ignored by external rules."""

    def is_ignored(self, path: Path, *, is_dir: bool) -> bool: ...


def find_repository_top(start: Path) -> Path | None:
    """Return the closest ancestor of `start` (inclusive) holding a `.git` entry."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


class GitIgnoreRules:
    """Compose every `.gitignore` between a top directory and each entry.

    Files are read lazily, once per directory, the first time an entry of
    that directory is checked.
    """

    def __init__(self, top: Path) -> None:
        self.top = top.resolve()
        self._specs: dict[Path, GitIgnoreSpec | None] = {}

    @classmethod
    def discover(cls, root: Path) -> GitIgnoreRules:
        """Build rules for `root`, anchored at its repository top if there is one.

        Args:
            root (Path): a walk root (file or directory)

        Returns:
            GitIgnoreRules: rules anchored at the enclosing repository, or at
                `root` itself when it is not inside a git checkout
        """
        base = root if root.is_dir() else root.parent
        top = find_repository_top(base)
        return cls(top if top is not None else base)

    def _spec_for(self, directory: Path) -> GitIgnoreSpec | None:
        if directory in self._specs:
            return self._specs[directory]
        spec: GitIgnoreSpec | None = None
        ignore_file = directory / GITIGNORE_FILE
        if ignore_file.is_file():
            try:
                lines = ignore_file.read_bytes().decode("utf-8").splitlines()
            except UnicodeDecodeError as e:
                raise InvalidEncodingError(path=ignore_file, reason=str(e)) from e
            except OSError as e:
                raise FileUnreadableError(path=ignore_file, reason=e.strerror or str(e)) from e
            spec = GitIgnoreSpec.from_lines(lines)
            logger.debug("loaded %s (%d patterns)", ignore_file, len(spec.patterns))
        self._specs[directory] = spec
        return spec

    def is_ignored(self, path: Path, *, is_dir: bool) -> bool:
        """Check whether `path` is ignored by any applicable `.gitignore`.

        Later (deeper) files take precedence over earlier ones, as in git.

        Args:
            path (Path): the entry to check
            is_dir (bool): whether the entry is a directory, so that
                directory-only patterns (`build/`) can apply

        Returns:
            bool: True if the deepest matching rule ignores the entry
        """
        # match the entry under its own name; a symlink is not replaced by its target
        resolved = path.parent.resolve() / path.name
        try:
            rel_parts = resolved.relative_to(self.top).parts
        except ValueError:
            return False
        if not rel_parts:
            return False

        ignored = False
        directory = self.top
        for depth in range(len(rel_parts)):
            spec = self._spec_for(directory)
            if spec is not None:
                rel = "/".join(rel_parts[depth:])
                if is_dir:
                    rel += "/"
                result = spec.check_file(rel)
                if result.include is not None:
                    ignored = bool(result.include)
            directory = directory / rel_parts[depth]
        return ignored
