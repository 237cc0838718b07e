#!/usr/bin/env python3
"""Tests for SyncedCollection, the local-first sync controller."""

import pytest

from fleet import MemoryMirror, SyncedCollection

from conftest import FakeRemote


class TestInitialize:
    """Tests for initialize."""

    def test_not_ready_before_initialize(self, trucks):
        assert trucks.ready is False
        assert trucks.items == []

    def test_remote_list_overwrites_mirror(self, remote, mirror, notifier):
        """Remote data replaces local data and is written to the mirror."""
        remote.data["trucks"] = [{"id": "x"}]
        mirror.set("trucks", [{"id": "y"}])
        coll = SyncedCollection("trucks", remote, mirror, notifier)

        coll.initialize()

        assert coll.items == [{"id": "x"}]
        assert mirror.get("trucks") == [{"id": "x"}]
        assert coll.online is True
        assert coll.ready is True

    def test_remote_empty_list_gives_empty_items(self, trucks, mirror):
        trucks.initialize(seed=[{"id": "seed"}])
        assert trucks.items == []
        assert mirror.get("trucks") == []

    def test_offline_uses_mirror(self, remote, mirror, trucks):
        """Failing list falls back to the mirror."""
        remote.online = False
        mirror.set("trucks", [{"id": "y"}])

        trucks.initialize(seed=[{"id": "seed"}])

        assert trucks.items == [{"id": "y"}]
        assert trucks.online is False
        assert trucks.ready is True

    def test_offline_without_mirror_uses_seed(self, remote, trucks):
        remote.online = False
        seed = [{"id": "seed"}]

        trucks.initialize(seed=seed)

        assert trucks.items == [{"id": "seed"}]
        assert trucks.items is not seed
        assert trucks.online is False
        assert trucks.ready is True

    def test_offline_empty_mirror_is_not_absent(self, remote, mirror, trucks):
        """An empty list in the mirror is used as-is, not replaced by the seed."""
        remote.online = False
        mirror.set("trucks", [])
        trucks.initialize(seed=[{"id": "seed"}])
        assert trucks.items == []

    def test_offline_corrupt_mirror_uses_seed(self, remote, trucks):
        remote.online = False
        trucks.mirror.set_raw("trucks", "{not json")
        trucks.initialize(seed=[{"id": "seed"}])
        assert trucks.items == [{"id": "seed"}]

    @pytest.mark.parametrize("stored", [[1, "x"], [{"id": "y"}, None], {"id": "y"}, "trucks"])
    def test_offline_mirror_without_records_uses_seed(self, remote, mirror, trucks, stored):
        remote.online = False
        mirror.set("trucks", stored)
        trucks.initialize(seed=[{"id": "seed", "miles": 1}])
        assert trucks.items == [{"id": "seed", "miles": 1}]

        trucks.update("seed", {"miles": 2})
        assert trucks.get("seed")["miles"] == 2
        assert mirror.get("trucks") == [{"id": "seed", "miles": 2}]

    def test_offline_no_mirror_no_seed(self, remote, trucks):
        remote.online = False
        trucks.initialize()
        assert trucks.items == []

    def test_remote_name_used_for_remote_calls(self, remote, mirror):
        """Ledger mirrors under its own name but lists remote 'expenses'."""
        remote.data["expenses"] = [{"id": "e1", "amount": 5}]
        ledger = SyncedCollection("ledger", remote, mirror, remote_name="expenses")
        ledger.initialize()
        assert ledger.items == [{"id": "e1", "amount": 5}]
        assert mirror.get("ledger") == [{"id": "e1", "amount": 5}]
        assert mirror.get("expenses") is None


class TestAdd:
    """Tests for add."""

    def test_online_add_prepends_server_record(self, remote, trucks, mirror, notifier):
        remote.data["trucks"] = [{"id": "old"}]
        trucks.initialize()

        rec = trucks.add({"name": "A"})

        assert rec == {"id": "srv1", "name": "A"}
        assert trucks.items[0]["id"] == "srv1"
        assert mirror.get("trucks") == [{"id": "srv1", "name": "A"}, {"id": "old"}]
        assert trucks.online is True
        assert notifier.last == ("success", "Saved")

    def test_offline_add_generates_local_id(self, remote, trucks, mirror, notifier):
        remote.data["trucks"] = [{"id": "a"}, {"id": "b"}]
        trucks.initialize()
        remote.online = False

        rec = trucks.add({"name": "A"})

        assert trucks.items[0] is rec
        assert rec["name"] == "A"
        assert rec["id"] not in ("a", "b")
        assert rec["id"]
        assert mirror.get("trucks")[0] == rec
        assert trucks.online is False
        assert notifier.last == ("degraded", "Saved locally")

    def test_offline_ids_are_distinct(self, remote, trucks):
        remote.online = False
        trucks.initialize()
        ids = {trucks.add({"n": i})["id"] for i in range(50)}
        assert len(ids) == 50

    def test_add_after_offline_recovers_online_flag(self, remote, trucks):
        remote.fail.add("list")
        trucks.initialize()
        assert trucks.online is False
        remote.fail.clear()
        trucks.add({"name": "A"})
        assert trucks.online is True


class TestUpdate:
    """Tests for update."""

    def test_online_merge_server_fields_win(self, remote, trucks, mirror):
        remote.data["trucks"] = [{"id": "1", "name": "local", "extra": 1}]
        trucks.initialize()
        remote.update_response = {"id": "1", "name": "server"}

        trucks.update("1", {"name": "patched"})

        assert trucks.items == [{"id": "1", "name": "server", "extra": 1}]
        assert mirror.get("trucks") == [{"id": "1", "name": "server", "extra": 1}]
        assert trucks.online is True

    def test_offline_merge_patch_wins(self, remote, trucks, mirror, notifier):
        remote.data["trucks"] = [{"id": "1", "name": "old", "extra": 1}]
        trucks.initialize()
        remote.online = False

        result = trucks.update("1", {"name": "patched"})

        assert trucks.items == [{"id": "1", "name": "patched", "extra": 1}]
        assert mirror.get("trucks") == [{"id": "1", "name": "patched", "extra": 1}]
        assert result == {"id": "1", "name": "patched"}
        assert trucks.online is False
        assert notifier.last == ("degraded", "Updated locally")

    def test_unknown_id_changes_nothing(self, remote, trucks):
        remote.data["trucks"] = [{"id": "1", "name": "a"}]
        trucks.initialize()
        remote.online = False

        trucks.update("missing", {"name": "b"})

        assert trucks.items == [{"id": "1", "name": "a"}]
        assert "update" in remote.calls

    def test_other_records_untouched(self, remote, trucks):
        remote.data["trucks"] = [{"id": "1", "n": 1}, {"id": "2", "n": 2}]
        trucks.initialize()
        trucks.update("2", {"n": 20})
        assert trucks.items == [{"id": "1", "n": 1}, {"id": "2", "n": 20}]


class TestRemove:
    """Tests for remove."""

    def test_online_remove(self, remote, trucks, mirror):
        remote.data["trucks"] = [{"id": "1"}, {"id": "2"}]
        trucks.initialize()

        assert trucks.remove("1") is True

        assert trucks.items == [{"id": "2"}]
        assert mirror.get("trucks") == [{"id": "2"}]
        assert trucks.online is True

    def test_offline_remove_still_applies(self, remote, trucks, mirror, notifier):
        remote.data["trucks"] = [{"id": "1"}, {"id": "2"}]
        trucks.initialize()
        remote.online = False

        assert trucks.remove("1") is False

        assert trucks.items == [{"id": "2"}]
        assert mirror.get("trucks") == [{"id": "2"}]
        assert trucks.online is False
        assert notifier.last == ("degraded", "Deleted locally")

    def test_remove_already_absent_on_server(self, remote, trucks, mirror):
        """Server no longer has the record: removed locally, still online."""
        remote.data["trucks"] = [{"id": "1"}]
        trucks.initialize()
        remote.data["trucks"] = []

        trucks.remove("1")

        assert trucks.items == []
        assert mirror.get("trucks") == []
        assert trucks.online is True

    def test_remove_unknown_id(self, trucks):
        trucks.initialize()
        trucks.remove("nope")
        assert trucks.items == []


class TestReload:
    """Offline writes and the next successful initialize."""

    def test_reload_discards_unconfirmed_offline_add(self, remote, mirror):
        remote.data["trucks"] = [{"id": "srv"}]
        first = SyncedCollection("trucks", remote, mirror)
        first.initialize()
        remote.online = False
        offline = first.add({"name": "offline"})
        assert mirror.get("trucks")[0] == offline

        remote.online = True
        second = SyncedCollection("trucks", remote, mirror)
        second.initialize()

        assert second.items == [{"id": "srv"}]
        assert all(r["id"] != offline["id"] for r in mirror.get("trucks"))

    def test_reload_offline_keeps_offline_add(self, remote, mirror):
        """Still offline on reload: the mirror keeps the local record."""
        remote.online = False
        first = SyncedCollection("trucks", remote, mirror)
        first.initialize()
        offline = first.add({"name": "offline"})

        second = SyncedCollection("trucks", remote, mirror)
        second.initialize(seed=[{"id": "seed"}])

        assert second.items == [offline]

    def test_collections_write_only_their_own_key(self):
        remote = FakeRemote({"trucks": [{"id": "t"}], "trailers": [{"id": "r"}]})
        mirror = MemoryMirror()
        trucks = SyncedCollection("trucks", remote, mirror)
        trailers = SyncedCollection("trailers", remote, mirror)
        trucks.initialize()
        trailers.initialize()
        trucks.add({"n": 1})
        assert mirror.get("trailers") == [{"id": "r"}]


class TestHelpers:
    """Tests for lookup helpers."""

    def test_get_len_iter(self, remote, trucks):
        remote.data["trucks"] = [{"id": "1"}, {"id": "2"}]
        trucks.initialize()
        assert trucks.get("2") == {"id": "2"}
        assert trucks.get("3") is None
        assert len(trucks) == 2
        assert [r["id"] for r in trucks] == ["1", "2"]

    def test_repr_shows_state(self, remote, trucks):
        assert "not ready" in repr(trucks)
        trucks.initialize()
        assert "online" in repr(trucks)
