#!/usr/bin/env python3
"""
Command line client for the fleet collections.

Commands:
  list        - Show a collection (trucks, trailers, cases, ledger, repairs)
  show        - Show one record
  add         - Add a record from field=value pairs
  update      - Change fields of a record
  remove      - Delete a record
  open-case   - Open a maintenance case against a truck or trailer
  advance     - Move a case to its next stage
  note        - Add a note to a case timeline
  ledger-add  - Record income or an expense
  finance     - Show income, expense and net totals
  pm          - Show preventive maintenance status of trucks
  pm-done     - Record a PM as done at the current odometer reading
  dashboard   - Summary counts
  validate    - Check local mirror files against the record schema

Every command first loads from the server. When the server cannot be
reached the local mirror is used and changes are saved locally only; they
are replaced by server data the next time the server is reachable.
"""

import argparse
import math
import sys
from datetime import datetime
from pathlib import Path
from tabulate import tabulate
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from fleet import ConsoleNotifier, Fleet, Priority, Settings, Status, load_settings, search
from fleet.fleet import COLLECTIONS, SEARCH_FIELDS
from fleet.log import setup_logging
from fleet.mirror import JsonFileMirror
from fleet.pm_due import PmDue
from fleet.status import STAGES
from fleet.validation import field_types, validate_mirror_file

# =============================================================================
# Formatting helpers
# =============================================================================


def format_miles(miles: Optional[float]) -> str:
    """Format mileage for display."""
    return f"{miles:,.0f}" if miles is not None else "-"


def format_cost(cost: Optional[float]) -> str:
    """Format money for display."""
    return f"${cost:,.2f}" if cost is not None else "-"


def format_timestamp(ms: Optional[float]) -> str:
    """Format an epoch-milliseconds timestamp as a local date."""
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d")


def format_remaining(svc: PmDue) -> str:
    """Format remaining miles until PM for display."""
    if svc.miles_remaining is None:
        return "-"
    if svc.miles_remaining < 0:
        return f"-{abs(svc.miles_remaining):,.0f}"
    return f"{svc.miles_remaining:,.0f}"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def text(value: Any) -> str:
    return "-" if value is None or value == "" else str(value)


# =============================================================================
# Tables
# =============================================================================

HEADERS = {
    "trucks": ["ID", "Make", "Model", "Year", "Miles", "PM Due", "Status", "Notes"],
    "trailers": ["ID", "Type", "Owner", "Status", "Ext ID", "Notes"],
    "cases": ["ID", "Asset", "Title", "Priority", "Stage", "Assigned", "Cost", "Opened"],
    "ledger": ["ID", "Type", "Amount", "Category", "Note", "Ref"],
    "repairs": ["ID", "Asset", "Date", "Description", "Cost", "Status"],
}


def make_row(collection: str, r: Dict[str, Any]) -> List[str]:
    """Convert one record to a table row for its collection."""
    if collection == "trucks":
        return [
            text(r.get("id")),
            text(r.get("make")),
            text(r.get("model")),
            text(r.get("year")),
            format_miles(r.get("miles")),
            format_miles(r.get("pmDueAt")),
            text(r.get("status")),
            truncate(r.get("notes")),
        ]
    if collection == "trailers":
        return [
            text(r.get("id")),
            text(r.get("type")),
            text(r.get("owner")),
            text(r.get("status")),
            text(r.get("extId")),
            truncate(r.get("notes")),
        ]
    if collection == "cases":
        asset = f"{r.get('assetType') or '?'} {r.get('assetId') or '?'}"
        return [
            text(r.get("id")),
            asset,
            truncate(r.get("title")),
            text(r.get("priority")),
            text(r.get("stage")),
            text(r.get("assigned")),
            format_cost(r.get("cost")),
            format_timestamp(r.get("createdAt")),
        ]
    if collection == "ledger":
        return [
            text(r.get("id")),
            text(r.get("type")),
            format_cost(r.get("amount")),
            text(r.get("category")),
            truncate(r.get("note")),
            text(r.get("ref")),
        ]
    if collection == "repairs":
        return [
            text(r.get("id")),
            f"{r.get('assetType') or '?'} {r.get('assetId') or '?'}",
            text(r.get("date")),
            truncate(r.get("description")),
            format_cost(r.get("cost")),
            text(r.get("status")),
        ]
    return [text(r.get("id")), truncate(str(r))]


def make_table(collection: str, items: List[Dict[str, Any]]) -> List[List[str]]:
    """Convert records to table rows."""
    return [make_row(collection, r) for r in items]


def make_pm_table(statuses: List[PmDue]) -> List[List[str]]:
    """Convert PM statuses to table rows."""
    labels = {
        Status.OVERDUE: "OVERDUE",
        Status.DUE_SOON: "DUE SOON",
        Status.OK: "OK",
        Status.UNKNOWN: "UNKNOWN",
    }
    rows = []
    for svc in statuses:
        rows.append(
            [
                svc.truck.name,
                format_miles(svc.truck.miles),
                format_miles(svc.due_miles),
                format_remaining(svc),
                labels[svc.status],
            ]
        )
    return rows


# =============================================================================
# Argument helpers
# =============================================================================


def resolve_collection(name: str) -> Optional[str]:
    """Map a user-supplied collection name to a local collection name."""
    name = name.lower()
    if name in COLLECTIONS:
        return name
    for local, remote_name in COLLECTIONS.items():
        if remote_name == name:
            return local
    return None


def parse_value(raw: str, types: Iterable[str] = ()) -> Any:
    """
    Parse a field value by the JSON types its schema declares.

    Only numeric fields are converted; everything else stays text exactly as
    typed. An empty value or 'null' clears a numeric field.
    """
    types = set(types)
    if not types & {"number", "integer"}:
        return raw
    if raw.strip().lower() in ("", "null"):
        return None
    try:
        return int(raw)
    except ValueError:
        if "number" not in types:
            raise ValueError(f"Expected a whole number, got '{raw}'")
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"Expected a number, got '{raw}'")
    if not math.isfinite(value):
        raise ValueError(f"Expected a number, got '{raw}'")
    return value


def parse_fields(pairs: List[str], collection: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse field=value arguments for a local collection.

    Raises ValueError on a malformed pair or a non-numeric value for a
    numeric field.
    """
    types = field_types(COLLECTIONS.get(collection, collection)) if collection else {}
    fields = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected field=value, got '{pair}'")
        try:
            fields[key] = parse_value(raw, types.get(key, ()))
        except ValueError as e:
            raise ValueError(f"{key}: {e}")
    return fields


def print_state(fleet: Fleet) -> None:
    if not fleet.online:
        print("(offline: showing local copy)")
        print()


# =============================================================================
# Record commands
# =============================================================================


def cmd_list(args, fleet: Fleet):
    """Show a collection."""
    collection = resolve_collection(args.collection)
    if collection is None:
        print(f"Error: Unknown collection '{args.collection}'")
        return 1
    fleet.initialize([collection])
    print_state(fleet)

    items = fleet.collection(collection).items
    if args.search:
        items = search(items, args.search, SEARCH_FIELDS[collection])
    if args.stage:
        items = [r for r in items if r.get("stage") == args.stage]

    print(f"{collection.capitalize()}: {len(items)}")
    if not items:
        return 0
    print()
    print(tabulate(make_table(collection, items), headers=HEADERS[collection], tablefmt="simple"))
    return 0


def cmd_show(args, fleet: Fleet):
    """Show one record."""
    collection = resolve_collection(args.collection)
    if collection is None:
        print(f"Error: Unknown collection '{args.collection}'")
        return 1
    fleet.initialize([collection])
    print_state(fleet)

    record = fleet.collection(collection).get(args.id)
    if record is None:
        print(f"Error: No {collection} record '{args.id}'")
        return 1

    rows = [[k, v] for k, v in record.items() if k != "timeline"]
    print(tabulate(rows, tablefmt="plain"))
    if record.get("timeline"):
        print()
        print("Timeline:")
        for entry in record["timeline"]:
            when = datetime.fromtimestamp(entry.get("t", 0) / 1000).strftime("%Y-%m-%d %H:%M")
            print(f"  {when}  {entry.get('note', '')}")
    return 0


def cmd_add(args, fleet: Fleet):
    """Add a record from field=value pairs."""
    collection = resolve_collection(args.collection)
    if collection is None:
        print(f"Error: Unknown collection '{args.collection}'")
        return 1
    try:
        data = parse_fields(args.fields, collection)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if not data:
        print("Error: No fields given")
        return 1
    fleet.initialize([collection])
    record = fleet.collection(collection).add(data)
    print(f"Added {collection} record '{record['id']}'")
    return 0


def cmd_update(args, fleet: Fleet):
    """Change fields of a record."""
    collection = resolve_collection(args.collection)
    if collection is None:
        print(f"Error: Unknown collection '{args.collection}'")
        return 1
    try:
        patch = parse_fields(args.fields, collection)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    patch.pop("id", None)
    if not patch:
        print("Error: No fields given")
        return 1

    fleet.initialize([collection])
    coll = fleet.collection(collection)
    if coll.get(args.id) is None:
        print(f"Error: No {collection} record '{args.id}'")
        return 1
    coll.update(args.id, patch)
    print(f"Updated {collection} record '{args.id}'")
    return 0


def cmd_remove(args, fleet: Fleet):
    """Delete a record."""
    collection = resolve_collection(args.collection)
    if collection is None:
        print(f"Error: Unknown collection '{args.collection}'")
        return 1
    fleet.initialize([collection])
    fleet.collection(collection).remove(args.id)
    print(f"Removed {collection} record '{args.id}'")
    return 0


# =============================================================================
# Case commands
# =============================================================================


def cmd_open_case(args, fleet: Fleet):
    """Open a maintenance case."""
    fleet.initialize(["cases"])
    record = fleet.open_case(
        args.asset_type, args.asset_id, args.title, args.priority, args.assigned
    )
    print(f"Opened case '{record['id']}': {record.get('title')}")
    return 0


def cmd_advance(args, fleet: Fleet):
    """Move a case to its next stage."""
    fleet.initialize(["cases"])
    record = fleet.advance_case(args.id)
    if record is None:
        print(f"Error: No case '{args.id}'")
        return 1
    print(f"Case '{args.id}' is now at stage {record.get('stage')}")
    return 0


def cmd_note(args, fleet: Fleet):
    """Add a note to a case timeline."""
    fleet.initialize(["cases"])
    record = fleet.add_case_note(args.id, args.text)
    if record is None:
        print(f"Error: No case '{args.id}'")
        return 1
    print(f"Note added to case '{args.id}'")
    return 0


# =============================================================================
# Ledger commands
# =============================================================================


def cmd_ledger_add(args, fleet: Fleet):
    """Record income or an expense."""
    fleet.initialize(["ledger"])
    try:
        record = fleet.add_ledger_entry(
            args.type, args.amount, args.category, args.note, args.ref
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    print(f"Recorded {record['type']} of {format_cost(record['amount'])}")
    return 0


def cmd_finance(args, fleet: Fleet):
    """Show income, expense and net totals."""
    since = None
    if args.since:
        try:
            since = date_parser.parse(args.since).date()
        except (ValueError, OverflowError):
            print(f"Error: Invalid date '{args.since}'")
            return 1

    fleet.initialize(["ledger"])
    print_state(fleet)
    totals = fleet.ledger_totals(since)
    if since:
        print(f"Since: {since.isoformat()}")
    rows = [
        ["Revenue", format_cost(totals.income)],
        ["Expenses", format_cost(totals.expense)],
        ["Net", format_cost(totals.net)],
    ]
    print(tabulate(rows, tablefmt="simple"))
    return 0


# =============================================================================
# Truck commands
# =============================================================================


def cmd_pm(args, fleet: Fleet):
    """Show preventive maintenance status of trucks."""
    fleet.initialize(["trucks"])
    print_state(fleet)
    statuses = fleet.pm_status(args.due_soon)
    if args.due_only:
        statuses = [s for s in statuses if s.is_due]
    if not statuses:
        print("No trucks to show.")
        return 0
    headers = ["Truck", "Miles", "PM Due (mi)", "Remaining (mi)", "Status"]
    print(tabulate(make_pm_table(statuses), headers=headers, tablefmt="simple"))
    return 0


def cmd_pm_done(args, fleet: Fleet):
    """Record a PM as done at the current odometer reading."""
    fleet.initialize(["trucks"])
    record = fleet.complete_pm(args.id)
    if record is None:
        print(f"Error: No truck '{args.id}'")
        return 1
    print(f"Truck '{args.id}' next PM due at {format_miles(record.get('pmDueAt'))} mi")
    return 0


# =============================================================================
# Dashboard / validate
# =============================================================================


def cmd_dashboard(args, fleet: Fleet):
    """Summary counts."""
    fleet.initialize()
    print_state(fleet)
    summary = fleet.dashboard()

    print("Trucks:")
    for status, count in sorted(summary["trucks"].items()):
        print(f"  {status}: {count}")
    print("Trailers:")
    for status, count in sorted(summary["trailers"].items()):
        print(f"  {status}: {count}")
    print("Cases by stage:")
    print(tabulate([[s, n] for s, n in summary["cases"].items()], tablefmt="plain"))
    print()
    print(f"Revenue: {format_cost(summary['income'])}")
    print(f"Expenses: {format_cost(summary['expense'])}")
    print(f"Net: {format_cost(summary['net'])}")
    return 0


def cmd_validate(args, settings: Settings):
    """Check local mirror files against the record schema."""
    mirror = JsonFileMirror(settings.mirror_dir)
    keys = mirror.keys()
    if not keys:
        print(f"Warning: No mirror files found in {settings.mirror_dir}")
        return 0

    all_valid = True
    for key in keys:
        path = mirror.path_for(key)
        errors = validate_mirror_file(path, COLLECTIONS.get(key, key))
        if errors:
            print(f"FAIL: {path.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {path.name}")

    return 0 if all_valid else 1


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fleet records client (works offline from a local mirror)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list trucks
  %(prog)s list cases --search coolant
  %(prog)s list cases --stage Parts
  %(prog)s add trucks id=7001 make=Kenworth model=T680 year=2023 miles=120000
  %(prog)s update trucks 7001 miles=121500 status=Service
  %(prog)s open-case truck 7001 "Brake chamber leak" --priority High
  %(prog)s advance <case-id>
  %(prog)s ledger-add expense 320.45 --category Fuel --ref 2025/03/13
  %(prog)s finance --since 2025-01-01
  %(prog)s pm --due-only
""",
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--api-base", type=str, help="Fleet API base URL")
    parser.add_argument("--mirror-dir", type=Path, help="Local mirror directory")
    parser.add_argument("--log-level", type=str, help="Log level (e.g. INFO, DEBUG)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show a collection")
    list_parser.add_argument("collection", help="trucks, trailers, cases, ledger or repairs")
    list_parser.add_argument("--search", type=str, help="Filter by text (case-insensitive)")
    list_parser.add_argument("--stage", choices=STAGES, help="Only cases at this stage")

    show_parser = subparsers.add_parser("show", help="Show one record")
    show_parser.add_argument("collection")
    show_parser.add_argument("id")

    add_parser = subparsers.add_parser("add", help="Add a record")
    add_parser.add_argument("collection")
    add_parser.add_argument("fields", nargs="+", help="field=value pairs")

    update_parser = subparsers.add_parser("update", help="Change fields of a record")
    update_parser.add_argument("collection")
    update_parser.add_argument("id")
    update_parser.add_argument("fields", nargs="+", help="field=value pairs")

    remove_parser = subparsers.add_parser("remove", help="Delete a record")
    remove_parser.add_argument("collection")
    remove_parser.add_argument("id")

    case_parser = subparsers.add_parser("open-case", help="Open a maintenance case")
    case_parser.add_argument("asset_type", choices=["truck", "trailer"])
    case_parser.add_argument("asset_id")
    case_parser.add_argument("title")
    case_parser.add_argument(
        "--priority", default=Priority.MEDIUM.value, choices=[p.value for p in Priority]
    )
    case_parser.add_argument("--assigned", type=str, help="Assignee")

    advance_parser = subparsers.add_parser("advance", help="Move a case to its next stage")
    advance_parser.add_argument("id")

    note_parser = subparsers.add_parser("note", help="Add a note to a case")
    note_parser.add_argument("id")
    note_parser.add_argument("text")

    ledger_parser = subparsers.add_parser("ledger-add", help="Record income or an expense")
    ledger_parser.add_argument("type", choices=["expense", "income"])
    ledger_parser.add_argument("amount", type=float)
    ledger_parser.add_argument("--category", type=str)
    ledger_parser.add_argument("--note", type=str)
    ledger_parser.add_argument("--ref", type=str, help="Reference, e.g. 2025/09/03")

    finance_parser = subparsers.add_parser("finance", help="Income, expense and net totals")
    finance_parser.add_argument("--since", type=str, help="Only entries dated on or after")

    pm_parser = subparsers.add_parser("pm", help="Preventive maintenance status")
    pm_parser.add_argument(
        "--due-soon", type=float, default=None,
        help="Miles before due that count as due soon",
    )
    pm_parser.add_argument("--due-only", action="store_true", help="Only overdue and due soon")

    pm_done_parser = subparsers.add_parser("pm-done", help="Record a PM as done")
    pm_done_parser.add_argument("id")

    subparsers.add_parser("dashboard", help="Summary counts")
    subparsers.add_parser("validate", help="Check local mirror files")

    return parser


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "add": cmd_add,
    "update": cmd_update,
    "remove": cmd_remove,
    "open-case": cmd_open_case,
    "advance": cmd_advance,
    "note": cmd_note,
    "ledger-add": cmd_ledger_add,
    "finance": cmd_finance,
    "pm": cmd_pm,
    "pm-done": cmd_pm_done,
    "dashboard": cmd_dashboard,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.config is not None and not args.config.exists():
        print(f"Error: File not found: {args.config}")
        return 1

    settings = load_settings(args.config)
    if args.api_base:
        settings.api_base = args.api_base
    if args.mirror_dir:
        settings.mirror_dir = args.mirror_dir
    if args.log_level:
        settings.log_level = args.log_level
    setup_logging(settings.log_level, json_format=args.json_logs)

    if args.command == "validate":
        return cmd_validate(args, settings)

    if args.command == "pm" and args.due_soon is None:
        args.due_soon = settings.due_soon_miles

    fleet = Fleet.from_settings(settings, ConsoleNotifier())
    try:
        return COMMANDS[args.command](args, fleet)
    finally:
        fleet.close()


if __name__ == "__main__":
    sys.exit(main() or 0)
