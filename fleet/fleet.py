"""Fleet - the synchronized collections and the operations on them."""

from collections import Counter
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .case import TimelineEntry
from .calculations import LedgerTotals, calc_ledger_totals, calc_next_pm_due, calc_pm_due
from .config import Settings
from .controller import SyncedCollection
from .log import get_logger
from .mirror import JsonFileMirror, Mirror
from .notifier import Notifier
from .pm_due import PmDue
from .records import (
    case_from_record,
    ledger_entry_from_record,
    timeline_to_records,
    truck_from_record,
)
from .remote import RemoteClient, make_remote
from .seed import now_ms, seed_data
from .status import STAGES, LedgerType, Priority, Stage, TrailerStatus, TruckStatus, next_stage

logger = get_logger(__name__)

# Local collection name -> remote collection name
COLLECTIONS = {
    "trucks": "trucks",
    "trailers": "trailers",
    "cases": "cases",
    "ledger": "expenses",
    "repairs": "repairs",
}

# Fields matched by free-text search, per local collection
SEARCH_FIELDS = {
    "trucks": ("id", "vin", "make", "model"),
    "trailers": ("id", "type", "owner", "status", "extId"),
    "cases": ("title", "assetId", "assigned"),
    "ledger": ("category", "note", "ref", "type"),
    "repairs": ("assetType", "assetId", "description", "status"),
}


def search(items: Iterable[Dict[str, Any]], query: str, fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Records whose joined ``fields`` contain ``query``, case-insensitively."""
    needle = (query or "").lower()
    return [
        item
        for item in items
        if needle in " ".join(str(item.get(f) or "") for f in fields).lower()
    ]


def _status_counts(items: Iterable[Dict[str, Any]], known) -> Dict[str, int]:
    """Count records by status; every known status is present, missing ones count as '-'."""
    counts = {s.value: 0 for s in known}
    counts.update(Counter(r.get("status") or "-" for r in items))
    return counts


class Fleet:
    """One SyncedCollection per collection, sharing a remote and a mirror."""

    def __init__(
        self,
        remote: RemoteClient,
        mirror: Mirror,
        notifier: Optional[Notifier] = None,
    ):
        self.remote = remote
        self.mirror = mirror
        self.collections: Dict[str, SyncedCollection] = {
            name: SyncedCollection(name, remote, mirror, notifier, remote_name)
            for name, remote_name in COLLECTIONS.items()
        }

    @classmethod
    def from_settings(cls, settings: Settings, notifier: Optional[Notifier] = None) -> "Fleet":
        return cls(make_remote(settings), JsonFileMirror(settings.mirror_dir), notifier)

    @property
    def trucks(self) -> SyncedCollection:
        return self.collections["trucks"]

    @property
    def trailers(self) -> SyncedCollection:
        return self.collections["trailers"]

    @property
    def cases(self) -> SyncedCollection:
        return self.collections["cases"]

    @property
    def ledger(self) -> SyncedCollection:
        return self.collections["ledger"]

    @property
    def repairs(self) -> SyncedCollection:
        return self.collections["repairs"]

    def collection(self, name: str) -> SyncedCollection:
        """Look up a collection by local or remote name."""
        if name in self.collections:
            return self.collections[name]
        for local, remote_name in COLLECTIONS.items():
            if remote_name == name:
                return self.collections[local]
        raise KeyError(name)

    def initialize(self, names: Optional[Iterable[str]] = None) -> bool:
        """
        Load collections (all by default), seeding from bundled data offline.

        Returns True when every loaded collection came from the remote.
        """
        seeds = seed_data()
        online = True
        for name in names or self.collections:
            coll = self.collection(name)
            coll.initialize(seeds.get(coll.remote_name, []))
            online = online and coll.online
        return online

    @property
    def online(self) -> bool:
        """True when at least one collection is loaded and every loaded one is online."""
        ready = [c for c in self.collections.values() if c.ready]
        return bool(ready) and all(c.online for c in ready)

    def close(self) -> None:
        self.remote.close()

    # =========================================================================
    # Cases
    # =========================================================================

    def open_case(
        self,
        asset_type: str,
        asset_id: str,
        title: str,
        priority: str = Priority.MEDIUM.value,
        assigned: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Open a new case at stage New."""
        now = now_ms()
        return self.cases.add(
            {
                "assetType": asset_type,
                "assetId": asset_id,
                "title": title,
                "priority": priority,
                "stage": Stage.NEW.value,
                "createdAt": now,
                "cost": 0,
                "assigned": assigned,
                "timeline": [{"t": now, "note": "Case created"}],
                "invoices": [],
            }
        )

    def advance_case(self, case_id: str) -> Optional[Dict[str, Any]]:
        """
        Move a case to its next stage and log the move on its timeline.

        A closed case is returned unchanged. Returns None for an unknown id.
        """
        record = self.cases.get(case_id)
        if record is None:
            return None
        case = case_from_record(record)
        if case.is_closed:
            return record

        stage = next_stage(case.stage)
        now = now_ms()
        case.timeline.append(TimelineEntry(now, f"Moved → {stage}"))
        if stage == Stage.CLOSED.value:
            case.timeline.append(TimelineEntry(now, "Case closed"))

        self.cases.update(case_id, {"stage": stage, "timeline": timeline_to_records(case)})
        return self.cases.get(case_id)

    def add_case_note(self, case_id: str, note: str) -> Optional[Dict[str, Any]]:
        """Append a note to a case timeline. Blank notes are ignored."""
        record = self.cases.get(case_id)
        if record is None:
            return None
        note = (note or "").strip()
        if not note:
            return record
        case = case_from_record(record)
        case.timeline.append(TimelineEntry(now_ms(), note))
        self.cases.update(case_id, {"timeline": timeline_to_records(case)})
        return self.cases.get(case_id)

    # =========================================================================
    # Ledger
    # =========================================================================

    def add_ledger_entry(
        self,
        type: str,
        amount: float,
        category: Optional[str] = None,
        note: Optional[str] = None,
        ref: Optional[str] = None,
    ) -> Dict[str, Any]:
        if type not in (LedgerType.EXPENSE.value, LedgerType.INCOME.value):
            raise ValueError(f"Ledger type must be 'expense' or 'income', not {type!r}")
        if amount is None or amount < 0:
            raise ValueError("Ledger amount must be zero or more")
        return self.ledger.add(
            {"type": type, "amount": amount, "category": category, "note": note, "ref": ref}
        )

    def ledger_totals(self, since: Optional[date] = None) -> LedgerTotals:
        return calc_ledger_totals(
            (ledger_entry_from_record(r) for r in self.ledger.items), since
        )

    # =========================================================================
    # Trucks
    # =========================================================================

    def pm_status(self, due_soon_miles: float = 1000) -> List[PmDue]:
        """PM status of every truck, most urgent first."""
        statuses = [
            calc_pm_due(truck_from_record(r), due_soon_miles) for r in self.trucks.items
        ]
        statuses.sort(
            key=lambda s: (
                s.status.value,
                s.miles_remaining if s.miles_remaining is not None else 0,
            )
        )
        return statuses

    def complete_pm(self, truck_id: str) -> Optional[Dict[str, Any]]:
        """Record a PM as done at the current odometer reading."""
        record = self.trucks.get(truck_id)
        if record is None:
            return None
        truck = truck_from_record(record)
        due = calc_next_pm_due(truck.miles, truck.pm_interval)
        if due is None:
            return record
        self.trucks.update(truck_id, {"pmDueAt": due})
        return self.trucks.get(truck_id)

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard(self) -> Dict[str, Any]:
        """Counts for the overview screen."""
        open_cases = {stage: 0 for stage in STAGES}
        for rec in self.cases.items:
            stage = rec.get("stage") or Stage.NEW.value
            if stage in open_cases:
                open_cases[stage] += 1
        totals = self.ledger_totals()
        return {
            "trucks": _status_counts(self.trucks.items, TruckStatus),
            "trailers": _status_counts(self.trailers.items, TrailerStatus),
            "cases": open_cases,
            "income": totals.income,
            "expense": totals.expense,
            "net": totals.net,
        }
