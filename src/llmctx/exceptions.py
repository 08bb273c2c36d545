from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LlmctxError(Exception):
    """Base exception for errors in the llmctx package.

    Every subclass is fatal to a run: the CLI reports it and emits no output.
    """


@dataclass(frozen=True)
class DirectoryUnreadableError(LlmctxError):
    """Raised when a directory cannot be listed during traversal."""

    path: Path
    reason: str = ""

    def __str__(self) -> str:
        return f"cannot read directory {self.path}: {self.reason or 'unknown error'}"


@dataclass(frozen=True)
class FileUnreadableError(LlmctxError):
    """Raised when a file cannot be stat'ed or read."""

    path: Path
    reason: str = ""

    def __str__(self) -> str:
        return f"cannot read file {self.path}: {self.reason or 'unknown error'}"


@dataclass(frozen=True)
class InvalidEncodingError(LlmctxError):
    """Raised when a file's content is not valid UTF-8."""

    path: Path
    reason: str = ""

    def __str__(self) -> str:
        return f"file {self.path} is not valid UTF-8 text: {self.reason or 'decode failed'}"


@dataclass(frozen=True)
class InvalidBudgetValueError(LlmctxError):
    """Raised when a token budget is not a non-negative integer."""

    value: object

    def __str__(self) -> str:
        return f"invalid max-tokens value: {self.value!r}"


@dataclass(frozen=True)
class ConfigError(LlmctxError):
    """Raised when configuration values or a configuration file are invalid."""

    source: str
    reason: str

    def __str__(self) -> str:
        return f"invalid configuration ({self.source}): {self.reason}"


@dataclass(frozen=True)
class CommandError(LlmctxError):
    """Raised when an external command cannot be started."""

    command: str
    reason: str

    def __str__(self) -> str:
        return f"cannot run command {self.command!r}: {self.reason}"


@dataclass(frozen=True)
class ClipboardError(LlmctxError):
    """Raised when the output cannot be placed on the clipboard."""

    reason: str

    def __str__(self) -> str:
        return f"cannot copy to clipboard: {self.reason}"


@dataclass(frozen=True)
class NotAGitRepositoryError(LlmctxError):
    """Raised when the specified directory is not inside a Git repository."""

    folder: Path
    message: str = "The specified directory is not a Git repository."

    def __str__(self) -> str:
        return f"{self.message} ({self.folder})"
