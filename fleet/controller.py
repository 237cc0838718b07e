"""
SyncedCollection - the local-first synchronization controller.

One instance owns the in-memory list of records for one collection and is
its only mutator. Every operation tries the remote store first and always
applies the matching local effect:

- initialize: remote list wins when reachable, else the local mirror,
  else the caller's seed
- add/update: the remote result is applied when the call succeeds, the
  local data otherwise ("Saved locally" / "Updated locally")
- remove: the record is dropped locally whatever the remote outcome

After every change the full list is written to the mirror under the
collection name. Nothing is queued for replay: records written while offline
are dropped by the next initialize that reaches a server without them.
"""

import copy
from typing import Any, Dict, Iterator, List, Optional

from .ids import new_id
from .log import get_logger
from .mirror import Mirror
from .notifier import LogNotifier, Notifier
from .remote import Ok, RemoteClient, RemoteResult

logger = get_logger(__name__)

Record = Dict[str, Any]


class SyncedCollection:
    """In-memory collection kept in step with a remote store and a local mirror."""

    def __init__(
        self,
        name: str,
        remote: RemoteClient,
        mirror: Mirror,
        notifier: Optional[Notifier] = None,
        remote_name: Optional[str] = None,
    ):
        self.name = name
        self.remote_name = remote_name or name
        self.remote = remote
        self.mirror = mirror
        self.notifier = notifier or LogNotifier()
        self.items: List[Record] = []
        self.ready = False
        self.online = False

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.items)

    def __repr__(self) -> str:
        state = "online" if self.online else "offline"
        if not self.ready:
            state = "not ready"
        return f"<SyncedCollection {self.name} ({len(self.items)} items, {state})>"

    def get(self, record_id: str) -> Optional[Record]:
        """Find a record by id."""
        for item in self.items:
            if item.get("id") == record_id:
                return item
        return None

    def _persist(self) -> None:
        try:
            self.mirror.set(self.name, self.items)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not write %s to the local mirror: %s", self.name, e)

    def _mark(self, result: RemoteResult) -> bool:
        self.online = isinstance(result, Ok)
        return self.online

    def initialize(self, seed: Optional[List[Record]] = None) -> List[Record]:
        """
        Load the collection.

        The remote list replaces local state and is written to the mirror.
        When the remote is unreachable the mirror is used, falling back to a
        copy of ``seed`` if the mirror has nothing for this collection.
        """
        result = self.remote.list(self.remote_name)
        if self._mark(result):
            self.items = list(result.value or [])
            self._persist()
            logger.debug("Loaded %d %s from remote", len(self.items), self.name)
        else:
            fallback = copy.deepcopy(seed) if seed is not None else []
            items = self.mirror.get(self.name, fallback)
            if not isinstance(items, list) or not all(isinstance(r, dict) for r in items):
                logger.warning("Mirror entry for %s is not a list of records; using seed",
                               self.name)
                items = fallback
            self.items = items
            logger.info(
                "Remote unavailable (%s); loaded %d %s locally",
                result.reason, len(self.items), self.name,
            )
        self.ready = True
        return self.items

    def add(self, data: Record) -> Record:
        """Create a record; returns the stored record."""
        result = self.remote.create(self.remote_name, data)
        if self._mark(result):
            record = result.value
            self.items = [record] + self.items
            self._persist()
            self.notifier.success("Saved")
        else:
            record = {"id": new_id(), **data}
            self.items = [record] + self.items
            self._persist()
            self.notifier.degraded("Saved locally")
        return record

    def update(self, record_id: str, patch: Record) -> Record:
        """
        Shallow-merge ``patch`` into the record with ``record_id``.

        Online, the server's returned record is merged (its keys win);
        offline, the patch itself is merged. An unknown id changes nothing.
        """
        result = self.remote.update(self.remote_name, record_id, patch)
        if self._mark(result):
            changes = result.value
        else:
            changes = patch
        self.items = [
            {**item, **changes} if item.get("id") == record_id else item
            for item in self.items
        ]
        self._persist()
        if not self.online:
            self.notifier.degraded("Updated locally")
            return {"id": record_id, **patch}
        return changes

    def remove(self, record_id: str) -> bool:
        """
        Delete a record locally whatever the remote says.

        Returns True when the remote confirmed the delete.
        """
        result = self.remote.remove(self.remote_name, record_id)
        confirmed = self._mark(result)
        self.items = [item for item in self.items if item.get("id") != record_id]
        self._persist()
        if not confirmed:
            self.notifier.degraded("Deleted locally")
        return confirmed
