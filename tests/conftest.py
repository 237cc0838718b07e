"""Shared fixtures: an in-memory remote whose reachability can be toggled."""

import copy

import pytest

from fleet import MemoryMirror, Ok, RemoteClient, RemoteFailure, RecordingNotifier, SyncedCollection


class FakeRemote(RemoteClient):
    """
    Remote store kept in a dict of lists.

    With ``online = False`` every call fails. ``fail`` names operations
    that fail even while online.
    """

    def __init__(self, data=None):
        self.data = copy.deepcopy(data or {})
        self.online = True
        self.fail = set()
        self.calls = []
        self.next_id = 1
        self.update_response = None

    def _down(self, op):
        self.calls.append(op)
        return not self.online or op in self.fail

    def list(self, collection):
        if self._down("list"):
            return RemoteFailure("list failed")
        return Ok(copy.deepcopy(self.data.get(collection, [])))

    def create(self, collection, data):
        if self._down("create"):
            return RemoteFailure("create failed", 500)
        rec = {"id": f"srv{self.next_id}", **data}
        self.next_id += 1
        self.data.setdefault(collection, []).insert(0, rec)
        return Ok(copy.deepcopy(rec))

    def update(self, collection, record_id, patch):
        if self._down("update"):
            return RemoteFailure("update failed", 500)
        if self.update_response is not None:
            return Ok(copy.deepcopy(self.update_response))
        for i, rec in enumerate(self.data.get(collection, [])):
            if rec["id"] == record_id:
                self.data[collection][i] = {**rec, **patch, "id": rec["id"]}
                return Ok(copy.deepcopy(self.data[collection][i]))
        return RemoteFailure("not found", 404)

    def remove(self, collection, record_id):
        if self._down("remove"):
            return RemoteFailure("remove failed", 500)
        self.data[collection] = [
            r for r in self.data.get(collection, []) if r["id"] != record_id
        ]
        return Ok(True)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def mirror():
    return MemoryMirror()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def trucks(remote, mirror, notifier):
    """A trucks controller over the fake remote, not yet initialized."""
    return SyncedCollection("trucks", remote, mirror, notifier)
