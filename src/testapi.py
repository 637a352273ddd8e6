from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import api
from api import app
from database import InMemoryReportStore, get_store
from models import CreditReportRecord

client = TestClient(app)
UPLOAD_URL = "/api/credit-reports/upload"


@pytest.fixture(autouse=True)
def store():
    fresh = InMemoryReportStore()
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.clear()


def _report_xml(pan="ABCDE1234F", score="750", name="John Doe") -> bytes:
    return f"""<report>
      <personalinfo><name>{name}</name><mobile>9876543210</mobile><pan>{pan}</pan></personalinfo>
      <creditscore>{score}</creditscore>
      <creditaccounts>
        <account type="credit card" status="closed"><accountnumber>CC1</accountnumber></account>
        <account type="xyz"><accountnumber>X2</accountnumber><currentbalance>2500</currentbalance></account>
      </creditaccounts>
    </report>""".encode()


def _upload(content: bytes, filename="report.xml", content_type="text/xml"):
    return client.post(UPLOAD_URL, files={"xmlFile": (filename, content, content_type)})


def _saved(store, pan="ABCDE1234F", score=750, day=1):
    return store.save(CreditReportRecord(
        name="John Doe",
        mobile_phone="9876543210",
        pan=pan,
        credit_score=score,
        report_date=datetime(2024, 1, day, tzinfo=timezone.utc),
        processing_status="completed",
    ))


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert r.json()["message"] == "Credit report API is running"


def test_root_lists_endpoints():
    body = client.get("/").json()
    assert body["endpoints"]["upload"] == "POST /api/credit-reports/upload"


def test_ready(store):
    assert client.get("/ready").json() == {"ready": True, "backend": "memory", "reports": 0}


def test_upload_valid_report(store):
    r = _upload(_report_xml(pan="abcde1234f"))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["pan"] == "ABCDE1234F"
    assert data["creditScore"] == 750
    assert data["fileName"] == "report.xml"
    assert store.count_documents() == 1

    report = client.get(f"/api/credit-reports/{data['reportId']}").json()["data"]
    assert [a["accountType"] for a in report["creditAccounts"]] == ["credit_card", "other"]
    assert [a["accountStatus"] for a in report["creditAccounts"]] == ["closed", "active"]
    assert report["totalBalance"] == 2500
    assert report["processingStatus"] == "completed"


def test_upload_out_of_range_score_is_not_saved(store):
    r = _upload(_report_xml(score="950"))
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Failed to parse XML file"
    assert body["errorType"] == "validation-error"
    assert body["fields"] == ["creditScore"]
    assert "between 300 and 900" in body["error"]
    assert store.count_documents() == 0


def test_upload_malformed_xml():
    r = _upload(b"<report><name>x</report>")
    assert r.status_code == 400
    assert r.json()["errorType"] == "syntax-error"


def test_upload_without_file():
    r = client.post(UPLOAD_URL, files={"other": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400
    assert r.json()["error"] == "NO_FILE"


def test_upload_wrong_type():
    r = _upload(b"%PDF-1.4", filename="report.pdf", content_type="application/pdf")
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_FILE_TYPE"


def test_upload_xml_extension_with_generic_type():
    r = _upload(_report_xml(), filename="report.xml", content_type="application/octet-stream")
    assert r.status_code == 201


def test_upload_empty_file():
    r = _upload(b"")
    assert r.status_code == 400
    assert r.json()["error"] == "EMPTY_FILE"


def test_upload_too_large(monkeypatch):
    small = replace(api.config, upload=replace(api.config.upload, max_file_mb=0))
    monkeypatch.setattr(api, "config", small)
    r = _upload(_report_xml())
    assert r.status_code == 413
    assert r.json()["error"] == "FILE_TOO_LARGE"


def test_list_reports_paginates(store):
    for pan, score in (("AAAAA1111A", 700), ("BBBBB2222B", 650), ("CCCCC3333C", 810)):
        _saved(store, pan=pan, score=score)
    r = client.get("/api/credit-reports", params={"limit": 2, "sortBy": "creditScore", "sortOrder": "asc"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert [rep["creditScore"] for rep in data["reports"]] == [650, 700]
    assert "creditAccounts" not in data["reports"][0]
    assert "addresses" not in data["reports"][0]
    assert data["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalCount": 3,
        "hasNextPage": True,
        "hasPrevPage": False,
        "limit": 2,
    }


@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": 101}, {"page": 0}, {"sortBy": "name"}, {"sortOrder": "up"}])
def test_list_reports_rejects_bad_query(params):
    r = client.get("/api/credit-reports", params=params)
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_REQUEST"


def test_get_report_errors():
    assert client.get("/api/credit-reports/abc").json()["error"] == "INVALID_ID"
    r = client.get("/api/credit-reports/999")
    assert r.status_code == 404
    assert r.json()["error"] == "REPORT_NOT_FOUND"


def test_reports_by_pan(store):
    _saved(store, day=1)
    _saved(store, day=5)
    _saved(store, pan="ZZZZZ9999Z")
    r = client.get("/api/credit-reports/pan/abcde1234f")
    data = r.json()["data"]
    assert data["pan"] == "ABCDE1234F"
    assert data["count"] == 2
    assert data["reports"][0]["reportDate"].startswith("2024-01-05")

    latest = client.get("/api/credit-reports/pan/ABCDE1234F/latest").json()["data"]
    assert latest["reportDate"].startswith("2024-01-05")


def test_reports_by_pan_errors():
    r = client.get("/api/credit-reports/pan/invalid-pan")
    assert r.status_code == 400
    assert r.json()["error"] == "INVALID_PAN"
    r = client.get("/api/credit-reports/pan/QQQQQ1111Q/latest")
    assert r.status_code == 404
    assert r.json()["error"] == "REPORT_NOT_FOUND"


def test_delete_report(store):
    saved = _saved(store)
    r = client.delete(f"/api/credit-reports/{saved.id}")
    assert r.status_code == 200
    assert r.json()["data"] == {"deletedId": saved.id, "pan": "ABCDE1234F"}
    assert client.delete(f"/api/credit-reports/{saved.id}").status_code == 404


def test_report_id_with_leading_zero(store):
    saved = _saved(store)
    r = client.get(f"/api/credit-reports/0{saved.id}")
    assert r.status_code == 200
    assert r.json()["data"]["id"] == saved.id


def test_unknown_route():
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert r.json() == {
        "success": False,
        "message": "API endpoint not found",
        "error": "NOT_FOUND",
        "path": "/api/nothing-here",
    }
