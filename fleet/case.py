"""Case class for maintenance tickets."""

from typing import List, Optional

from .status import Stage


class TimelineEntry:
    """A timestamped note on a case timeline."""

    def __init__(self, t: int, note: str):
        self.t = t
        self.note = note


class Case:
    """A maintenance ticket raised against a truck or trailer."""

    def __init__(
        self,
        id: str,
        asset_type: Optional[str] = None,
        asset_id: Optional[str] = None,
        title: Optional[str] = None,
        priority: Optional[str] = None,
        stage: str = Stage.NEW.value,
        created_at: Optional[int] = None,
        cost: float = 0,
        assigned: Optional[str] = None,
        timeline: Optional[List[TimelineEntry]] = None,
        invoices: Optional[list] = None,
    ):
        self.id = id
        self.asset_type = asset_type
        self.asset_id = asset_id
        self.title = title
        self.priority = priority
        self.stage = stage
        self.created_at = created_at
        self.cost = cost or 0
        self.assigned = assigned
        self.timeline = timeline or []
        self.invoices = invoices or []

    @property
    def is_closed(self) -> bool:
        return self.stage == Stage.CLOSED.value

    @property
    def last_note(self) -> Optional[TimelineEntry]:
        """Most recent timeline entry."""
        if not self.timeline:
            return None
        return max(self.timeline, key=lambda e: e.t)
