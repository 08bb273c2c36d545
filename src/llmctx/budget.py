from __future__ import annotations


class BudgetLedger:
    """Track consumed size units against a fixed maximum.

    `consumed_units` only grows, and only by amounts checked beforehand not to
    push it past `max_units`.
    """

    def __init__(self, max_units: int) -> None:
        if max_units < 0:
            raise ValueError(f"max_units must be non-negative, got {max_units}")
        self.max_units = max_units
        self.consumed_units = 0

    def __repr__(self) -> str:
        return f"BudgetLedger(consumed_units={self.consumed_units}, max_units={self.max_units})"

    @property
    def remaining_units(self) -> int:
        return self.max_units - self.consumed_units

    def fits(self, size: int) -> bool:
        return self.consumed_units + size <= self.max_units

    def try_commit(self, size: int) -> bool:
        """Commit `size` units if they fit.

        Args:
            size (int): units the candidate block would add

        Returns:
            bool: True if the units were committed, False if the ledger is
                left untouched because they would exceed the maximum
        """
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        if not self.fits(size):
            return False
        self.consumed_units += size
        return True

    def is_exhausted(self) -> bool:
        """Whether no commit of non-zero size can ever succeed again."""
        return self.consumed_units >= self.max_units
