"""Budget-aware assembly of file blocks into a single context buffer.

The assembler is the only consumer of the walker: for every eligible file it
formats a block, asks the ledger whether it fits, and stops walking entirely
once the ledger is exhausted. A file that does not fit is skipped; a smaller
file found later may still be accepted.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from llmctx.config import AssembledContext, EntryKind
from llmctx.file_manipulation import read_file_content
from llmctx.formatter import BlockFormatter
from llmctx.gitignore import GitIgnoreRules
from llmctx.ignore_policy import IgnorePolicy
from llmctx.logging import logger
from llmctx.walker import TreeWalker

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from llmctx.budget import BudgetLedger
    from llmctx.config import FormattedBlock, Section
    from llmctx.gitignore import IgnoreSource

    Augmentation = Callable[[], Section]


class OutputBuffer:
    """Ordered concatenation of accepted blocks and trailing sections."""

    def __init__(self) -> None:
        self._out = io.StringIO()
        self.included: list[str] = []

    def append_block(self, path: Path, block: FormattedBlock) -> None:
        self._out.write(block.render())
        self.included.append(str(path))

    def append_text(self, text: str) -> None:
        self._out.write(text)

    def getvalue(self) -> str:
        return self._out.getvalue()


class ContextAssembler:
    """Walk roots and collect formatted files until the budget runs out.

    Args:
        ledger (BudgetLedger): the budget to commit blocks against
        policy (IgnorePolicy | None): eligibility rules; fixed rules only if None
        formatter (BlockFormatter | None): block renderer
        use_gitignore (bool): whether `.gitignore` files prune the walk
        ignore_source_factory: builds the ignore source for a root; defaults
            to `GitIgnoreRules.discover`
    """

    def __init__(
        self,
        ledger: BudgetLedger,
        policy: IgnorePolicy | None = None,
        formatter: BlockFormatter | None = None,
        *,
        use_gitignore: bool = True,
        ignore_source_factory: Callable[[Path], IgnoreSource] | None = None,
    ) -> None:
        self.ledger = ledger
        self.policy = policy or IgnorePolicy()
        self.formatter = formatter or BlockFormatter()
        self.use_gitignore = use_gitignore
        self.ignore_source_factory = ignore_source_factory or GitIgnoreRules.discover

    def assemble(
        self,
        roots: Sequence[Path],
        augmentations: Iterable[Augmentation] = (),
    ) -> AssembledContext:
        """Build the context for `roots`, in order, then run `augmentations`.

        Args:
            roots (Sequence[Path]): walk roots, in caller order
            augmentations (Iterable[Augmentation]): callables producing
                trailing sections; they run after all roots and never
                touch the budget

        Raises:
            LlmctxError: on any unreadable directory or file, or invalid
                encoding; nothing is returned in that case.

        Returns:
            AssembledContext: the final buffer and run statistics
        """
        buffer = OutputBuffer()
        skipped: list[str] = []
        walker = TreeWalker(self.policy)
        exhausted = self.ledger.is_exhausted()

        for root in roots:
            if exhausted:
                break
            ignore_source = self.ignore_source_factory(root) if self.use_gitignore else None
            for entry in walker.walk(root, ignore_source):
                if entry.kind is not EntryKind.FILE:
                    continue
                if self.policy.should_skip(entry):
                    if entry.path == root:
                        logger.warning("%s is skipped due to naming conventions.", root)
                    continue

                block = self.formatter.format(entry.path, read_file_content(entry.path))
                if self.ledger.try_commit(block.size):
                    buffer.append_block(entry.path, block)
                else:
                    skipped.append(str(entry.path))
                    logger.info(
                        "%s skipped: %d units over %d remaining",
                        entry.path,
                        block.size,
                        self.ledger.remaining_units,
                    )

                if self.ledger.is_exhausted():
                    exhausted = True
                    logger.info("budget exhausted after %s, stopping", entry.path)
                    break

        for augment in augmentations:
            buffer.append_text(self.formatter.format_section(augment()))

        logger.info(
            "assembled %d files (%d skipped), %d/%d units",
            len(buffer.included),
            len(skipped),
            self.ledger.consumed_units,
            self.ledger.max_units,
        )
        return AssembledContext(
            text=buffer.getvalue(),
            included=buffer.included,
            skipped=skipped,
            consumed_units=self.ledger.consumed_units,
            max_units=self.ledger.max_units,
            exhausted=exhausted,
        )
