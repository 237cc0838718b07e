"""Starter records used to seed a new server database or an empty mirror."""

import time
from typing import Any, Dict, List

from .ids import new_id

DAY_MS = 86400000


def now_ms() -> int:
    """Current time as epoch milliseconds, the timestamp unit of records."""
    return int(time.time() * 1000)


def seed_data() -> Dict[str, List[Dict[str, Any]]]:
    """Fresh seed records keyed by remote collection name."""
    now = now_ms()
    return {
        "trucks": [
            {
                "id": "3252", "make": "Freightliner", "model": "Cascadia", "year": 2021,
                "vin": "1FUJHHDR0MLMJ4879", "status": "Active", "miles": 618230,
                "pmInterval": 20000, "pmDueAt": 618230, "notes": "Oil change due now",
            },
            {
                "id": "5496", "make": "Volvo", "model": "VNL", "year": 2024,
                "vin": "4V4NC9EH0LN223912", "status": "Active", "miles": 409659,
                "pmInterval": 20000, "pmDueAt": 429659,
                "notes": "Windshield replaced 2025-09-04",
            },
        ],
        "trailers": [
            {
                "id": "XTRA-40123", "type": "Dry Van", "owner": "XTRA Lease",
                "status": "On Road", "extId": "SkyB-12345", "notes": "External tracked",
            },
            {
                "id": "UST-9001", "type": "Dry Van", "owner": "US TEAM",
                "status": "Yard", "extId": "-", "notes": "Ready",
            },
        ],
        "cases": [
            {
                "id": new_id(), "assetType": "truck", "assetId": "3252",
                "title": "Coolant leak", "priority": "High", "stage": "Diagnose",
                "createdAt": now - DAY_MS * 2, "cost": 0, "assigned": "Jack",
                "timeline": [
                    {"t": now - DAY_MS * 2, "note": "Driver reports coolant on ground."}
                ],
                "invoices": [],
            },
            {
                "id": new_id(), "assetType": "trailer", "assetId": "XTRA-40123",
                "title": "ABS light ON", "priority": "Medium", "stage": "Parts",
                "createdAt": now - DAY_MS, "cost": 75, "assigned": "Aidar",
                "timeline": [{"t": now - DAY_MS, "note": "Mobile tech scheduled."}],
                "invoices": [],
            },
        ],
        "expenses": [
            {
                "id": new_id(), "type": "expense", "amount": 535, "category": "Tires",
                "note": "Steer tire fix, Houston, TX", "ref": "2023/00",
            },
            {
                "id": new_id(), "type": "expense", "amount": 325,
                "category": "Windshield", "note": "Windshield mobile, Wichita, KS",
                "ref": "2025/09/04",
            },
            {
                "id": new_id(), "type": "income", "amount": 4200, "category": "Load",
                "note": "Load #AB-778, Jack", "ref": "2025/09/03",
            },
        ],
        "repairs": [
            {
                "id": new_id(), "assetType": "Truck", "assetId": "3252",
                "date": "2025-03-01", "description": "Oil change + front pads",
                "cost": 230.50, "status": "Completed",
            },
            {
                "id": new_id(), "assetType": "Trailer", "assetId": "XTRA-40123",
                "date": "2025-03-11", "description": "Light wiring repair",
                "cost": 120.00, "status": "In progress",
            },
        ],
    }
