"""LedgerEntry class for income and expense records."""

from typing import Optional

from .status import LedgerType


class LedgerEntry:
    """A single income or expense line."""

    def __init__(
        self,
        id: str,
        type: str,
        amount: float,
        category: Optional[str] = None,
        note: Optional[str] = None,
        ref: Optional[str] = None,
    ):
        self.id = id
        self.type = type
        self.amount = amount
        self.category = category
        self.note = note
        self.ref = ref

    @property
    def signed_amount(self) -> float:
        """Amount with income positive and expense negative."""
        if self.type == LedgerType.INCOME.value:
            return self.amount
        if self.type == LedgerType.EXPENSE.value:
            return -self.amount
        return 0
