"""Helper functions for PM due and ledger calculations."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from dateutil import parser as date_parser

from .ledger_entry import LedgerEntry
from .pm_due import PmDue
from .status import LedgerType, Status
from .truck import Truck


def calc_next_pm_due(miles: Optional[float], interval: Optional[float]) -> Optional[float]:
    """Next PM due odometer reading: current miles + interval."""
    if miles is None or interval is None:
        return None
    return miles + interval


def check_status(current: float, due: float, soon_threshold: float) -> Status:
    """Determine status by comparing current value to due threshold."""
    if current >= due:
        return Status.OVERDUE
    if current >= due - soon_threshold:
        return Status.DUE_SOON
    return Status.OK


def calc_pm_due(truck: Truck, due_soon_miles: float = 1000) -> PmDue:
    """
    Calculate PM status for a truck.

    Uses the explicit pmDueAt reading when present, otherwise nothing can be
    said and the status is UNKNOWN.
    """
    if truck.miles is None or truck.pm_due_at is None:
        return PmDue(truck=truck, status=Status.UNKNOWN)
    return PmDue(
        truck=truck,
        status=check_status(truck.miles, truck.pm_due_at, due_soon_miles),
        due_miles=truck.pm_due_at,
        miles_remaining=truck.pm_due_at - truck.miles,
    )


def parse_ref_date(ref: Optional[str]) -> Optional[date]:
    """Parse a ledger reference like '2025/09/03' into a date, if it is one."""
    if not ref:
        return None
    try:
        return date_parser.parse(ref, yearfirst=True).date()
    except (ValueError, OverflowError):
        return None


@dataclass
class LedgerTotals:
    """Income, expense and net over a set of ledger entries."""

    income: float = 0
    expense: float = 0

    @property
    def net(self) -> float:
        return self.income - self.expense


def calc_ledger_totals(
    entries: Iterable[LedgerEntry], since: Optional[date] = None
) -> LedgerTotals:
    """
    Sum income and expense amounts.

    With ``since``, only entries whose ref parses as a date on or after it
    are counted.
    """
    totals = LedgerTotals()
    for entry in entries:
        if since is not None:
            entry_date = parse_ref_date(entry.ref)
            if entry_date is None or entry_date < since:
                continue
        if entry.type == LedgerType.INCOME.value:
            totals.income += entry.amount
        elif entry.type == LedgerType.EXPENSE.value:
            totals.expense += entry.amount
    return totals
