from __future__ import annotations

from typing import TYPE_CHECKING

from llmctx.config import BLOCK_BODY, BLOCK_HEADER, FENCE_OVERHEAD, FormattedBlock, Section

if TYPE_CHECKING:
    from pathlib import Path


def block_size(path_str: str, trimmed: str) -> int:
    """Units a block adds to the budget: path, trimmed content and fence overhead."""
    return len(path_str) + len(trimmed) + FENCE_OVERHEAD


class BlockFormatter:
    """Render files as `path:` headers followed by fenced content.

    Content is not escaped: a file containing a fence line will visually
    close the block early.
    """

    def format(self, path: Path | str, raw_content: str) -> FormattedBlock:
        """Trim `raw_content` once and render it under a header naming `path`.

        The returned size is computed from the same trimmed text that is
        rendered, so it can be checked against the budget before committing.

        Args:
            path (Path | str): path shown in the header
            raw_content (str): the file content as read

        Returns:
            FormattedBlock: header, body and exact size of the block
        """
        path_str = str(path)
        trimmed = raw_content.strip()
        return FormattedBlock(
            header=BLOCK_HEADER.format(path=path_str),
            body=BLOCK_BODY.format(content=trimmed),
            size=block_size(path_str, trimmed),
        )

    def format_section(self, section: Section) -> str:
        """Render a trailing section with the same fence convention."""
        return BLOCK_HEADER.format(path=section.label) + BLOCK_BODY.format(content=section.body.strip())
