"""Truck class for power units."""

from typing import Optional


class Truck:
    """A truck with odometer and preventive maintenance schedule."""

    def __init__(
        self,
        id: str,
        make: Optional[str] = None,
        model: Optional[str] = None,
        year: Optional[int] = None,
        vin: Optional[str] = None,
        miles: Optional[float] = None,
        pm_interval: Optional[float] = None,
        pm_due_at: Optional[float] = None,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        self.id = id
        self.make = make
        self.model = model
        self.year = year
        self.vin = vin
        self.miles = miles
        self.pm_interval = pm_interval
        self.pm_due_at = pm_due_at
        self.status = status
        self.notes = notes

    @property
    def name(self) -> str:
        """Human-readable unit name."""
        parts = [str(p) for p in (self.year, self.make, self.model) if p]
        if not parts:
            return self.id
        return f"{self.id} ({' '.join(parts)})"
