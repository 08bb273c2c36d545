from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_TOKENS = 100_000_000
CHARS_PER_TOKEN = 5

CONFIG_FILE_NAME = ".llmctx.yaml"
ENV_PREFIX = "LLMCTX_"

DEFAULT_DEBUG_COMMAND = "cargo build"
DEFAULT_TEST_COMMAND = "cargo test"

# Rendering of one file block. FENCE_OVERHEAD is every character the block
# adds on top of the path and the trimmed content.
BLOCK_HEADER = "\n\n{path}:\n"
BLOCK_BODY = "```\n{content}\n```"
FENCE_OVERHEAD = len(BLOCK_HEADER.format(path="")) + len(BLOCK_BODY.format(content=""))

LOCK_MANIFESTS = frozenset(
    {
        "package-lock.json",
        "pnpm-lock.yaml",
        "npm-shrinkwrap.json",
    },
)

LICENSE_NAMES = frozenset(
    {
        "LICENSE",
        "LICENSE.md",
        "LICENSE.txt",
        "LICENCE",
        "COPYING",
    },
)

VENDOR_DIRS = frozenset({"node_modules"})

GLOB_CHARS = frozenset("*?[")


class EntryKind(StrEnum):
    """Kind of a filesystem entry discovered during traversal."""

    FILE = auto()
    DIRECTORY = auto()


class CandidateEntry(BaseModel):
    """A path discovered during traversal, not yet filtered.

    Attributes:
        path: Path as built by the walker (root joined with entry names).
        kind: Whether the entry is a file or a directory.
        rel_path: Path below the walk root; scoped exclusions only look at this part.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    path: Path = Field(..., description="Path as discovered by the walker")
    kind: EntryKind = Field(..., description="File or directory")
    rel_path: Path | None = Field(None, description="Path relative to the walk root, if known")


class FormattedBlock(BaseModel):
    """One file rendered as a labeled fenced block.

    `size` is the number of budget units the block adds when committed and
    always equals `len(header) + len(body)`.
    """

    model_config = ConfigDict(frozen=True)

    header: str = Field(..., description="Header line naming the path")
    body: str = Field(..., description="Fenced, trimmed content")
    size: int = Field(..., ge=0, description="Exact budget units of the rendered block")

    def render(self) -> str:
        return self.header + self.body


class Section(BaseModel):
    """A labeled trailing section appended after the file blocks."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Label printed above the fence")
    body: str = Field("", description="Section content")


class AssembledContext(BaseModel):
    """Result of one assembly run, handed once to the sink."""

    text: str = Field("", description="Concatenated blocks and trailing sections")
    included: list[str] = Field(default_factory=list, description="Paths of accepted blocks, in order")
    skipped: list[str] = Field(default_factory=list, description="Paths rejected for size")
    consumed_units: int = Field(0, ge=0, description="Units committed to the budget")
    max_units: int = Field(0, ge=0, description="Budget ceiling in units")
    exhausted: bool = Field(default=False, description="Whether walking stopped on exhaustion")
