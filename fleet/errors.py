"""Exceptions raised by the server-side collection database."""

from typing import Optional


class FleetError(Exception):
    """Base exception for fleet data errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class UnknownCollectionError(FleetError):
    """Raised for a collection name outside the known set."""

    def __init__(self, collection: str):
        super().__init__(f"Unknown collection '{collection}'", status_code=404)
        self.collection = collection


class RecordNotFoundError(FleetError):
    """Raised when no record with the given id exists."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"No record '{record_id}' in {collection}", status_code=404)
        self.collection = collection
        self.record_id = record_id


class InvalidRecordError(FleetError):
    """Raised when a record does not match its collection schema."""

    def __init__(self, collection: str, detail: str):
        super().__init__(f"Invalid {collection} record: {detail}", status_code=400)
        self.collection = collection
        self.detail = detail
