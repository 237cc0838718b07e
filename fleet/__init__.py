"""
Local-first fleet data synchronization.

This package keeps fleet records consistent across memory, a local mirror
and a remote store:
- SyncedCollection: the controller for one collection
- Mirror: MemoryMirror and JsonFileMirror local persistence
- RemoteClient: ApiCollectionClient and SupabaseCollectionClient
- Fleet: trucks, trailers, cases and ledger with their domain operations
- Truck, Trailer, Case, LedgerEntry: typed views of records
"""

from .status import Status, Stage, Priority, LedgerType, TruckStatus, TrailerStatus, next_stage
from .truck import Truck
from .trailer import Trailer
from .case import Case, TimelineEntry
from .ledger_entry import LedgerEntry
from .pm_due import PmDue
from .calculations import LedgerTotals, calc_ledger_totals, calc_next_pm_due, calc_pm_due, check_status
from .config import Settings, load_settings
from .mirror import Mirror, MemoryMirror, JsonFileMirror
from .notifier import Notifier, LogNotifier, ConsoleNotifier, RecordingNotifier
from .remote import (
    Ok,
    RemoteFailure,
    RemoteClient,
    ApiCollectionClient,
    SupabaseCollectionClient,
    make_remote,
)
from .controller import SyncedCollection
from .fleet import Fleet, search
from .ids import new_id

__all__ = [
    "Status",
    "Stage",
    "Priority",
    "LedgerType",
    "TruckStatus",
    "TrailerStatus",
    "next_stage",
    "Truck",
    "Trailer",
    "Case",
    "TimelineEntry",
    "LedgerEntry",
    "PmDue",
    "LedgerTotals",
    "calc_ledger_totals",
    "calc_next_pm_due",
    "calc_pm_due",
    "check_status",
    "Settings",
    "load_settings",
    "Mirror",
    "MemoryMirror",
    "JsonFileMirror",
    "Notifier",
    "LogNotifier",
    "ConsoleNotifier",
    "RecordingNotifier",
    "Ok",
    "RemoteFailure",
    "RemoteClient",
    "ApiCollectionClient",
    "SupabaseCollectionClient",
    "make_remote",
    "SyncedCollection",
    "Fleet",
    "search",
    "new_id",
]
