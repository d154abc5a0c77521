"""
tests/api/test_records_controller.py

Tests for the database-backed geofile and custodial record routes.

Connected mode uses a MagicMock database (see conftest.fake_db); degraded
mode checks that the same paths answer 503 instead of 404 or a crash.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from fastapi.testclient import TestClient


def _geofile_doc(**overrides) -> dict:
    doc = {
        "_id": ObjectId(),
        "filename": "abc.kml",
        "original_name": "beat.kml",
        "file_type": "kml",
        "size": 12,
        "url": "/uploads/abc.kml",
        "description": "Beat map",
        "uploaded_by": "sgt.lee",
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    doc.update(overrides)
    return doc


def _cursor(docs: list) -> MagicMock:
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


class TestRecordsDegraded:
    """Without a database the record paths exist but are not available."""

    def test_list_geofiles_unavailable(self, client: TestClient) -> None:
        response = client.get("/api/geofiles")
        assert response.status_code == 503
        assert response.json()["reason"] == "DatabaseUnavailable"

    def test_nested_custodial_path_unavailable(self, client: TestClient) -> None:
        response = client.get(f"/api/custodial-records/{ObjectId()}")
        assert response.status_code == 503

    def test_post_unavailable(self, client: TestClient, geojson_file) -> None:
        response = client.post("/api/geofiles", files=[geojson_file])
        assert response.status_code == 503


class TestGeofileRecords:

    def test_list_geofiles(self, connected_client: TestClient, fake_db) -> None:
        doc = _geofile_doc()
        fake_db["geofiles"].find.return_value = _cursor([doc])

        response = connected_client.get("/api/geofiles")

        assert response.status_code == 200
        geofiles = response.json()["geofiles"]
        assert geofiles[0]["id"] == str(doc["_id"])
        assert geofiles[0]["original_name"] == "beat.kml"

    def test_create_geofile_stores_file_and_record(
        self, connected_client: TestClient, fake_db, geojson_file
    ) -> None:
        inserted = ObjectId()
        fake_db["geofiles"].insert_one = AsyncMock(return_value=MagicMock(inserted_id=inserted))

        response = connected_client.post(
            "/api/geofiles", files=[geojson_file], data={"description": "Zones"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == str(inserted)
        assert body["file_type"] == "geojson"
        assert body["description"] == "Zones"
        stored_doc = fake_db["geofiles"].insert_one.await_args.args[0]
        assert stored_doc["url"].startswith("/uploads/")

    def test_create_geofile_rejects_bad_extension(self, connected_client: TestClient, fake_db) -> None:
        fake_db["geofiles"].insert_one = AsyncMock()
        bad = ("file", ("evil.exe", io.BytesIO(b"MZ"), "application/octet-stream"))

        response = connected_client.post("/api/geofiles", files=[bad])

        assert response.status_code == 400
        assert response.json()["reason"] == "UnsupportedFileType"
        fake_db["geofiles"].insert_one.assert_not_awaited()

    def test_get_geofile_not_found(self, connected_client: TestClient, fake_db) -> None:
        fake_db["geofiles"].find_one = AsyncMock(return_value=None)

        response = connected_client.get(f"/api/geofiles/{ObjectId()}")

        assert response.status_code == 404

    def test_get_geofile_invalid_id(self, connected_client: TestClient) -> None:
        response = connected_client.get("/api/geofiles/not-an-object-id")
        assert response.status_code == 404

    def test_delete_geofile(self, connected_client: TestClient, fake_db) -> None:
        fake_db["geofiles"].delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))

        response = connected_client.delete(f"/api/geofiles/{ObjectId()}")

        assert response.status_code == 204


class TestCustodialRecords:

    def test_create_record_with_photo(self, connected_client: TestClient, fake_db, png_photo) -> None:
        fake_db["custodial_records"].insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId())
        )

        response = connected_client.post(
            "/api/custodial-records",
            data={"full_name": "John Doe", "booking_number": "B-1001", "charges": "Theft"},
            files=[png_photo],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["full_name"] == "John Doe"
        assert body["photo_url"].endswith(".png")

    def test_create_record_without_photo(self, connected_client: TestClient, fake_db) -> None:
        fake_db["custodial_records"].insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId())
        )

        response = connected_client.post(
            "/api/custodial-records",
            data={"full_name": "Jane Roe", "booking_number": "B-1002"},
        )

        assert response.status_code == 201
        assert response.json()["photo_url"] is None

    def test_blank_required_fields_rejected(self, connected_client: TestClient, fake_db) -> None:
        fake_db["custodial_records"].insert_one = AsyncMock()

        response = connected_client.post(
            "/api/custodial-records", data={"full_name": "  ", "booking_number": ""}
        )

        assert response.status_code == 400
        fake_db["custodial_records"].insert_one.assert_not_awaited()

    def test_bad_photo_rejected_without_record(
        self, connected_client: TestClient, fake_db, exe_photo
    ) -> None:
        fake_db["custodial_records"].insert_one = AsyncMock()

        response = connected_client.post(
            "/api/custodial-records",
            data={"full_name": "John Doe", "booking_number": "B-1001"},
            files=[exe_photo],
        )

        assert response.status_code == 400
        assert response.json()["reason"] == "UnsupportedFileType"
        fake_db["custodial_records"].insert_one.assert_not_awaited()


class TestRecordSaveFailure:
    """A failed insert must not leave a public file behind."""

    def test_custodial_insert_failure_removes_photo(
        self, connected_client: TestClient, fake_db, png_photo, connected_settings
    ) -> None:
        fake_db["custodial_records"].insert_one = AsyncMock(side_effect=RuntimeError("write concern timeout"))

        response = connected_client.post(
            "/api/custodial-records",
            data={"full_name": "John Doe", "booking_number": "B-1001"},
            files=[png_photo],
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert "error" in response.json()
        assert list(Path(connected_settings.upload_dir).iterdir()) == []

    def test_geofile_insert_failure_removes_file(
        self, connected_client: TestClient, fake_db, geojson_file, connected_settings
    ) -> None:
        fake_db["geofiles"].insert_one = AsyncMock(side_effect=RuntimeError("network error"))

        response = connected_client.post("/api/geofiles", files=[geojson_file])

        assert response.status_code == 500
        assert "error" in response.json()
        assert list(Path(connected_settings.upload_dir).iterdir()) == []
