"""Trailer class."""

from typing import Optional


class Trailer:
    """A trailer, owned or leased, optionally tracked by an outside system."""

    def __init__(
        self,
        id: str,
        type: Optional[str] = None,
        owner: Optional[str] = None,
        status: Optional[str] = None,
        ext_id: Optional[str] = None,
        notes: Optional[str] = None,
    ):
        self.id = id
        self.type = type
        self.owner = owner
        self.status = status
        self.ext_id = ext_id
        self.notes = notes
