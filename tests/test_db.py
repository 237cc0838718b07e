#!/usr/bin/env python3
"""Tests for the JSON file database behind the API server."""
import json

import pytest

from fleet.db import COLLECTIONS, FileDatabase
from fleet.errors import InvalidRecordError, RecordNotFoundError, UnknownCollectionError


@pytest.fixture
def db(tmp_path):
    return FileDatabase(tmp_path / "db.json")


class TestLoad:
    """Tests for load and seeding."""

    def test_seeds_on_first_use(self, db):
        data = db.load()
        assert set(data) == set(COLLECTIONS)
        assert db.path.exists()

    def test_missing_collections_added(self, db):
        db.path.write_text(json.dumps({"trucks": [{"id": "1"}]}))
        data = db.load()
        assert data["trucks"] == [{"id": "1"}]
        assert data["expenses"] == []

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_bad_file_reseeded(self, db, content):
        db.path.write_text(content)
        data = db.load()
        assert len(data["trucks"]) == 2
        assert isinstance(json.loads(db.path.read_text()), dict)


class TestCrud:
    """Tests for list/get/create/update/delete."""

    def test_unknown_collection(self, db):
        with pytest.raises(UnknownCollectionError) as exc:
            db.list("widgets")
        assert exc.value.status_code == 404

    def test_get(self, db):
        assert db.get("trucks", "3252")["make"] == "Freightliner"
        with pytest.raises(RecordNotFoundError):
            db.get("trucks", "nope")

    def test_create_generates_id(self, db):
        rec = db.create("cases", {"title": "x"})
        assert len(rec["id"]) == 10
        assert db.list("cases")[0] == rec

    def test_create_persists(self, db, tmp_path):
        rec = db.create("trucks", {"id": 7001})
        assert rec["id"] == "7001"
        assert FileDatabase(tmp_path / "db.json").get("trucks", "7001") == rec

    def test_update(self, db):
        rec = db.update("trucks", "3252", {"miles": 620000, "id": "x"})
        assert rec["id"] == "3252"
        assert rec["miles"] == 620000
        assert db.get("trucks", "3252")["miles"] == 620000

    def test_create_invalid_not_saved(self, db):
        with pytest.raises(InvalidRecordError) as exc:
            db.create("cases", {"assetId": 3252})
        assert exc.value.status_code == 400
        assert len(db.list("cases")) == 2

    def test_update_invalid_not_saved(self, db):
        with pytest.raises(InvalidRecordError):
            db.update("trucks", "3252", {"miles": -5})
        assert db.get("trucks", "3252")["miles"] == 618230

    def test_update_missing(self, db):
        with pytest.raises(RecordNotFoundError):
            db.update("trucks", "nope", {"miles": 1})

    def test_delete(self, db):
        db.delete("trailers", "UST-9001")
        assert [t["id"] for t in db.list("trailers")] == ["XTRA-40123"]
        with pytest.raises(RecordNotFoundError):
            db.delete("trailers", "UST-9001")

    def test_no_temp_file_left(self, db, tmp_path):
        db.create("cases", {"title": "x"})
        assert [p.name for p in tmp_path.iterdir()] == ["db.json"]
