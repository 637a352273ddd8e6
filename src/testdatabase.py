from datetime import datetime, timezone

import pytest

from database import InMemoryReportStore, SqliteReportStore, warm_database
from models import CreditAccount, CreditReportRecord


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryReportStore()
    return SqliteReportStore(tmp_path / "reports.db")


def _record(pan="ABCDE1234F", score=750, day=1, name="John Doe"):
    return CreditReportRecord(
        name=name,
        mobile_phone="9876543210",
        pan=pan,
        credit_score=score,
        report_date=datetime(2024, 1, day, tzinfo=timezone.utc),
        xml_file_name="report.xml",
        processing_status="completed",
        credit_accounts=[CreditAccount(account_number="A1", current_balance=100, amount_overdue=5)],
    )


def test_save_assigns_id_and_round_trips(store):
    saved = store.save(_record())
    assert saved.id
    loaded = store.find_by_id(saved.id)
    assert loaded.name == "John Doe"
    assert loaded.pan == "ABCDE1234F"
    assert loaded.credit_accounts[0].account_number == "A1"
    assert loaded.total_balance == 100
    assert loaded.total_overdue == 5
    assert loaded.report_date == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_save_existing_record_updates_in_place(store):
    saved = store.save(_record())
    again = store.save(saved.model_copy(update={"name": "Jane Doe"}))
    assert again.id == saved.id
    assert again.updated_at >= saved.updated_at
    assert store.count_documents() == 1
    assert store.find_by_id(saved.id).name == "Jane Doe"


def test_find_sorts_and_pages(store):
    for score in (700, 650, 810):
        store.save(_record(score=score))
    assert store.count_documents() == 3
    ascending = store.find(sort_by="creditScore", sort_order="asc")
    assert [r.credit_score for r in ascending] == [650, 700, 810]
    page = store.find(sort_by="creditScore", sort_order="desc", skip=1, limit=1)
    assert [r.credit_score for r in page] == [700]


def test_find_rejects_unknown_sort_field(store):
    with pytest.raises(ValueError):
        store.find(sort_by="name")


def test_find_by_pan_newest_first(store):
    store.save(_record(day=1))
    store.save(_record(day=3))
    store.save(_record(day=2))
    store.save(_record(pan="ZZZZZ9999Z"))
    reports = store.find_by_pan("abcde1234f")
    assert [r.report_date.day for r in reports] == [3, 2, 1]
    assert store.find_latest_by_pan("ABCDE1234F").report_date.day == 3
    assert store.find_latest_by_pan("QQQQQ1111Q") is None


def test_delete(store):
    saved = store.save(_record())
    deleted = store.find_by_id_and_delete(saved.id)
    assert deleted.id == saved.id
    assert store.find_by_id(saved.id) is None
    assert store.find_by_id_and_delete(saved.id) is None
    assert store.count_documents() == 0


def test_unknown_ids(store):
    assert store.find_by_id("999") is None
    assert store.find_by_id("abc") is None


def test_sqlite_reports_survive_reopen(tmp_path):
    path = tmp_path / "reports.db"
    saved = SqliteReportStore(path).save(_record())
    reopened = SqliteReportStore(path)
    assert reopened.find_by_id(saved.id).pan == "ABCDE1234F"


def test_warm_database(store):
    store.save(_record())
    status = warm_database(store)
    assert status == {"ready": True, "backend": store.backend, "reports": 1}


def test_ids_with_leading_zeros_resolve_on_both_backends(store):
    saved = store.save(_record())
    padded = "0" + saved.id
    assert store.find_by_id(padded).id == saved.id
    assert store.find_by_id_and_delete(padded).id == saved.id
    assert store.find_by_id(saved.id) is None
