"""Tests for user records and visibility rules."""

from datetime import datetime, timezone

import pytest

from vendorgate.directory import USERS_COLLECTION, UserDirectory
from vendorgate.types import AccountStatus, AccountType, UserProfile

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def profile(user_id, account_type, **extra):
    return UserProfile(user_id=user_id, first_name="F", last_name="L", email=f"{user_id}@x.test",
                       company_name=f"{user_id} Inc", account_type=account_type,
                       status=AccountStatus.ACTIVE, created_at=NOW, last_updated=NOW, extra=extra)


@pytest.fixture
def directory(store):
    directory = UserDirectory(store)
    directory.save(profile("v1", AccountType.VENDORS))
    directory.save(profile("v2", AccountType.VENDORS, adminApproved=False))
    directory.save(profile("c1", AccountType.CLIENTS))
    directory.save(profile("a1", AccountType.ADMIN))
    return directory


def ids(profiles):
    return sorted(p.user_id for p in profiles)


def test_vendors_see_clients(directory):
    assert ids(directory.visible_users("v1")) == ["c1"]


def test_clients_see_vendors(directory):
    assert ids(directory.visible_users("c1")) == ["v1", "v2"]


def test_admin_sees_everyone(directory):
    assert ids(directory.visible_users("a1")) == ["a1", "c1", "v1", "v2"]


def test_unknown_user(directory):
    with pytest.raises(LookupError):
        directory.visible_users("nobody")


def test_admin_view_hides_unapproved(directory):
    assert ids(directory.list_by_type(AccountType.VENDORS)) == ["v1", "v2"]
    assert ids(directory.list_by_type(AccountType.VENDORS, admin_view=True)) == ["v1"]


def test_profile_record_round_trip_keeps_extra_fields(directory):
    loaded = directory.get("v2")
    assert loaded.extra == {"adminApproved": False}
    assert loaded.account_type == AccountType.VENDORS
    assert loaded.created_at == NOW


def test_record_upload_merges(directory, store):
    directory.record_upload("c1", ["coi.pdf", "tax.pdf"], uploaded_at=NOW,
                            uploaded_files={"risk": "memory://coi.pdf"})
    record = store.get(USERS_COLLECTION, "c1")
    assert record["documentCount"] == 2
    assert record["lastUploadedDocuments"] == ["coi.pdf", "tax.pdf"]
    assert record["uploadedFiles"] == {"risk": "memory://coi.pdf"}
    assert record["firstName"] == "F"


def test_record_upload_requires_existing_user(directory):
    with pytest.raises(LookupError):
        directory.record_upload("ghost", ["coi.pdf"])


def test_suspend_marks_record(directory, store):
    suspended = directory.suspend("v1")
    assert suspended.status == AccountStatus.SUSPENDED
    assert store.get(USERS_COLLECTION, "v1")["companyName"] == "v1 Inc"

    with pytest.raises(LookupError):
        directory.suspend("ghost")


def test_delete(directory):
    directory.delete("c1")
    assert directory.get("c1") is None
    directory.delete("c1")
