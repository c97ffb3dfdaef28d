"""Tests for staging and promoting uploaded documents."""

from datetime import datetime, timezone

import pytest

from vendorgate.intake import PERMANENT_COLLECTION, TEMP_COLLECTION, DocumentIntake, temp_blob_path
from vendorgate.types import DocumentCategory, DocumentUpload

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


class FlakyBlobStore:
    """Fails on the nth put."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    def put(self, path, data, content_type=None):
        self.calls += 1
        if self.calls == self.fail_on:
            raise ConnectionError("upload interrupted")
        return f"memory://{path}"

    def delete(self, path):
        pass


@pytest.fixture
def intake(blobs, store):
    return DocumentIntake(blobs, store)


def test_store_temporary_writes_blob_and_record(intake, blobs, store):
    uploads = [DocumentUpload("soc2.pdf", b"%PDF-soc2"),
               DocumentUpload("scan.pdf", b"%PDF-scan", category=DocumentCategory.CRIMINAL)]
    docs = intake.store_temporary("temp_1", uploads, now=NOW)

    assert [d.category for d in docs] == [DocumentCategory.CYBERSECURITY, DocumentCategory.CRIMINAL]
    assert blobs.blobs[temp_blob_path("temp_1", "soc2.pdf")] == b"%PDF-soc2"
    assert docs[0].url == "memory://temp/temp_1/soc2.pdf"

    record = store.get(TEMP_COLLECTION, "temp_1_scan.pdf")
    assert record["owner"] == "temp_1"
    assert record["type"] == "criminal"
    assert record["uploadDate"].startswith("2025-06-01")


def test_partial_failure_keeps_earlier_documents(store):
    """Intake is best-effort: no rollback of files already staged."""
    intake = DocumentIntake(FlakyBlobStore(fail_on=2), store)
    uploads = [DocumentUpload(f"doc{i}.pdf", b"x") for i in range(3)]
    with pytest.raises(ConnectionError):
        intake.store_temporary("temp_2", uploads, now=NOW)
    assert [d.name for d in intake.list_temporary("temp_2")] == ["doc0.pdf"]


def test_same_name_overwrites(intake):
    intake.store_temporary("temp_3", [DocumentUpload("coi.pdf", b"v1")], now=NOW)
    intake.store_temporary("temp_3", [DocumentUpload("coi.pdf", b"v2")], now=NOW)
    assert len(intake.list_temporary("temp_3")) == 1


def test_promote_moves_records_to_user(intake, store):
    intake.store_temporary("temp_4", [DocumentUpload("coi.pdf", b"x"), DocumentUpload("tax.pdf", b"y")], now=NOW)
    promoted = intake.promote("temp_4", "user_1")

    assert sorted(d.name for d in promoted) == ["coi.pdf", "tax.pdf"]
    assert intake.list_temporary("temp_4") == []
    assert store.get(PERMANENT_COLLECTION, "user_1_coi.pdf")["owner"] == "user_1"
    assert sorted(d.name for d in intake.list_verified("user_1")) == ["coi.pdf", "tax.pdf"]


def test_discard_removes_records_and_blobs(intake, blobs):
    intake.store_temporary("temp_5", [DocumentUpload("coi.pdf", b"x")], now=NOW)
    intake.store_temporary("temp_6", [DocumentUpload("coi.pdf", b"x")], now=NOW)
    assert intake.discard("temp_5") == 1
    assert intake.list_temporary("temp_5") == []
    assert temp_blob_path("temp_5", "coi.pdf") not in blobs.blobs
    assert len(intake.list_temporary("temp_6")) == 1


def test_demote_returns_records_to_session(intake, store):
    intake.store_temporary("temp_7", [DocumentUpload("coi.pdf", b"x"), DocumentUpload("tax.pdf", b"y")], now=NOW)
    intake.promote("temp_7", "user_7")

    assert intake.demote("user_7", "temp_7") == 2
    assert intake.list_verified("user_7") == []
    assert sorted(d.name for d in intake.list_temporary("temp_7")) == ["coi.pdf", "tax.pdf"]
    assert store.get(TEMP_COLLECTION, "temp_7_coi.pdf")["owner"] == "temp_7"
