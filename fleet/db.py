"""Flat JSON file database backing the REST API server."""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Union

from jsonschema import ValidationError

from .errors import InvalidRecordError, RecordNotFoundError, UnknownCollectionError
from .ids import new_id
from .log import get_logger
from .seed import seed_data
from .validation import validate_record

logger = get_logger(__name__)

COLLECTIONS = ("trucks", "trailers", "cases", "repairs", "expenses")


class FileDatabase:
    """
    All collections in one JSON document on disk.

    The file is created from the seed on first use. An unreadable file is
    logged and replaced by a fresh seed. Every write rewrites the whole
    document through a temporary file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def ensure(self) -> None:
        if not self.path.exists():
            self._save(seed_data())

    def load(self) -> Dict[str, List[Dict[str, Any]]]:
        self.ensure()
        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                data = json.load(fp)
            if not isinstance(data, dict):
                raise ValueError("top level is not an object")
        except (OSError, ValueError) as e:
            logger.warning("DB read failed; re-seeding %s: %s", self.path, e)
            data = seed_data()
            self._save(data)
        for col in COLLECTIONS:
            data.setdefault(col, [])
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as fp:
            json.dump(data, fp, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    @staticmethod
    def _check(collection: str) -> None:
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(collection)

    @staticmethod
    def _validate(collection: str, rec: Dict[str, Any]) -> None:
        try:
            validate_record(collection, rec)
        except ValidationError as e:
            raise InvalidRecordError(collection, e.message)

    def list(self, collection: str) -> List[Dict[str, Any]]:
        self._check(collection)
        return self.load()[collection]

    def get(self, collection: str, record_id: str) -> Dict[str, Any]:
        self._check(collection)
        for rec in self.load()[collection]:
            if str(rec.get("id")) == str(record_id):
                return rec
        raise RecordNotFoundError(collection, record_id)

    def create(self, collection: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a record at the front.

        The server assigns the id unless the payload carries one (trucks and
        trailers are usually keyed by their unit number).
        """
        self._check(collection)
        data = self.load()
        rec = {**payload, "id": str(payload.get("id") or new_id())}
        self._validate(collection, rec)
        data[collection].insert(0, rec)
        self._save(data)
        return rec

    def update(self, collection: str, record_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge ``payload`` into a record; the id never changes."""
        self._check(collection)
        data = self.load()
        items = data[collection]
        for i, rec in enumerate(items):
            if str(rec.get("id")) == str(record_id):
                merged = {**rec, **payload, "id": rec["id"]}
                self._validate(collection, merged)
                items[i] = merged
                self._save(data)
                return merged
        raise RecordNotFoundError(collection, record_id)

    def delete(self, collection: str, record_id: str) -> None:
        self._check(collection)
        data = self.load()
        before = len(data[collection])
        data[collection] = [
            rec for rec in data[collection] if str(rec.get("id")) != str(record_id)
        ]
        if len(data[collection]) == before:
            raise RecordNotFoundError(collection, record_id)
        self._save(data)
