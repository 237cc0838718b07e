"""PmDue dataclass for calculated preventive maintenance status."""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .status import Status

if TYPE_CHECKING:
    from .truck import Truck


@dataclass
class PmDue:
    """Calculated PM due information for a truck."""

    truck: "Truck"
    status: Status
    due_miles: Optional[float] = None
    miles_remaining: Optional[float] = None

    @property
    def is_due(self) -> bool:
        return self.status in (Status.OVERDUE, Status.DUE_SOON)
