"""Conversion between wire/mirror records (camelCase dicts) and typed classes."""

from typing import Any, Dict

from .case import Case, TimelineEntry
from .ledger_entry import LedgerEntry
from .trailer import Trailer
from .truck import Truck

Record = Dict[str, Any]


def truck_from_record(dct: Record) -> Truck:
    return Truck(
        dct["id"],
        dct.get("make"),
        dct.get("model"),
        dct.get("year"),
        dct.get("vin"),
        dct.get("miles"),
        dct.get("pmInterval"),
        dct.get("pmDueAt"),
        dct.get("status"),
        dct.get("notes"),
    )


def trailer_from_record(dct: Record) -> Trailer:
    return Trailer(
        dct["id"],
        dct.get("type"),
        dct.get("owner"),
        dct.get("status"),
        dct.get("extId"),
        dct.get("notes"),
    )


def case_from_record(dct: Record) -> Case:
    timeline = [
        TimelineEntry(e.get("t", 0), e.get("note", "")) for e in dct.get("timeline") or []
    ]
    return Case(
        dct["id"],
        dct.get("assetType"),
        dct.get("assetId"),
        dct.get("title"),
        dct.get("priority"),
        dct.get("stage") or "New",
        dct.get("createdAt"),
        dct.get("cost") or 0,
        dct.get("assigned"),
        timeline,
        dct.get("invoices"),
    )


def ledger_entry_from_record(dct: Record) -> LedgerEntry:
    return LedgerEntry(
        dct["id"],
        dct.get("type", "expense"),
        dct.get("amount") or 0,
        dct.get("category"),
        dct.get("note"),
        dct.get("ref"),
    )


def _drop_none(d: Record) -> Record:
    """Omit None values for cleaner records."""
    return {k: v for k, v in d.items() if v is not None}


def truck_to_record(truck: Truck) -> Record:
    return _drop_none(
        {
            "id": truck.id,
            "make": truck.make,
            "model": truck.model,
            "year": truck.year,
            "vin": truck.vin,
            "miles": truck.miles,
            "pmInterval": truck.pm_interval,
            "pmDueAt": truck.pm_due_at,
            "status": truck.status,
            "notes": truck.notes,
        }
    )


def trailer_to_record(trailer: Trailer) -> Record:
    return _drop_none(
        {
            "id": trailer.id,
            "type": trailer.type,
            "owner": trailer.owner,
            "status": trailer.status,
            "extId": trailer.ext_id,
            "notes": trailer.notes,
        }
    )


def timeline_to_records(case: Case) -> list:
    return [{"t": e.t, "note": e.note} for e in case.timeline]


def case_to_record(case: Case) -> Record:
    return _drop_none(
        {
            "id": case.id,
            "assetType": case.asset_type,
            "assetId": case.asset_id,
            "title": case.title,
            "priority": case.priority,
            "stage": case.stage,
            "createdAt": case.created_at,
            "cost": case.cost,
            "assigned": case.assigned,
            "timeline": timeline_to_records(case),
            "invoices": list(case.invoices),
        }
    )


def ledger_entry_to_record(entry: LedgerEntry) -> Record:
    return _drop_none(
        {
            "id": entry.id,
            "type": entry.type,
            "amount": entry.amount,
            "category": entry.category,
            "note": entry.note,
            "ref": entry.ref,
        }
    )
