import logging
from pathlib import Path

import creditparser
from creditparser import parse_credit_report

SAMPLE = Path(__file__).parent.parent / "data" / "sample_report.xml"

MINIMAL_REPORT = b"""<report>
  <personalinfo><name>John Doe</name><mobile>9876543210</mobile><pan>ABCDE1234F</pan></personalinfo>
  <creditscore>750</creditscore>
</report>"""


def test_minimal_report():
    result = parse_credit_report(MINIMAL_REPORT, "a.xml")
    assert result.success
    record = result.record
    assert record.name == "John Doe"
    assert record.mobile_phone == "9876543210"
    assert record.pan == "ABCDE1234F"
    assert record.credit_score == 750
    assert record.credit_accounts == []
    assert record.addresses == []
    assert record.report_summary.total_accounts == 0
    assert record.report_summary.current_balance_amount == 0
    assert record.xml_file_name == "a.xml"
    assert record.processing_status == "completed"
    assert record.id is None


def test_out_of_range_score_fails_validation():
    xml = MINIMAL_REPORT.replace(b"750", b"950")
    result = parse_credit_report(xml, "b.xml")
    assert not result.success
    assert result.record is None
    assert result.error_type == "validation-error"
    assert "Credit score must be between 300 and 900" in result.error
    assert result.fields == ["creditScore"]


def test_score_with_trailing_text_is_accepted():
    xml = MINIMAL_REPORT.replace(b"<creditscore>750</creditscore>", b"<creditscore>750 (CIBIL)</creditscore>")
    result = parse_credit_report(xml, "score.xml")
    assert result.success
    assert result.record.credit_score == 750


def test_two_accounts_in_source_order():
    xml = b"""<report>
      <name>John Doe</name><mobile>9876543210</mobile><pan>ABCDE1234F</pan><score>700</score>
      <creditaccounts>
        <account type="credit card" status="closed"><accountnumber>CC1</accountnumber></account>
        <account type="xyz"><accountnumber>X2</accountnumber><currentbalance>1000</currentbalance></account>
      </creditaccounts>
    </report>"""
    result = parse_credit_report(xml, "c.xml")
    assert result.success
    accounts = result.record.credit_accounts
    assert [a.account_number for a in accounts] == ["CC1", "X2"]
    assert [a.account_type for a in accounts] == ["credit_card", "other"]
    assert [a.account_status for a in accounts] == ["closed", "active"]
    assert result.record.total_balance == 1000


def test_missing_fields_are_all_reported():
    result = parse_credit_report(b"<report><name>A</name></report>", "d.xml")
    assert result.error_type == "validation-error"
    assert result.fields == ["mobilePhone", "pan", "creditScore"]


def test_malformed_xml():
    result = parse_credit_report(b"<report><name>x</report>", "e.xml")
    assert not result.success
    assert result.error_type == "syntax-error"
    assert result.fields == []


def test_extraction_failure_is_reported(monkeypatch):
    def boom(tree):
        raise KeyError("personalinfo")

    monkeypatch.setattr(creditparser, "extract_credit_data", boom)
    result = parse_credit_report(MINIMAL_REPORT, "f.xml")
    assert result.error_type == "extraction-error"
    assert result.error.startswith("Data extraction failed")


def test_injected_logger_is_used(caplog):
    caplog.set_level(logging.INFO)
    parse_credit_report(MINIMAL_REPORT, "g.xml", log=logging.getLogger("ingest.test"))
    assert any(r.name == "ingest.test" for r in caplog.records)


def test_result_to_dict():
    ok = parse_credit_report(MINIMAL_REPORT, "a.xml").to_dict()
    assert ok["success"] is True
    assert ok["data"]["pan"] == "ABCDE1234F"
    assert ok["data"]["creditAccounts"] == []
    assert ok["data"]["totalBalance"] == 0

    failed = parse_credit_report(b"<report/>", "h.xml").to_dict()
    assert failed["success"] is False
    assert failed["errorType"] == "validation-error"
    assert failed["fileName"] == "h.xml"


def test_sample_report():
    result = parse_credit_report(SAMPLE.read_bytes(), SAMPLE.name)
    assert result.success
    record = result.record
    assert record.pan == "ABCDE1234F"
    assert record.credit_score == 742
    assert [a.account_type for a in record.credit_accounts] == ["credit_card", "home_loan", "personal_loan"]
    assert [a.account_status for a in record.credit_accounts] == ["active", "active", "closed"]
    assert record.credit_accounts[1].emi_amount == 18500
    assert [a.type for a in record.addresses] == ["current", "permanent"]
    assert record.addresses[0].city == "Bengaluru"
    assert record.report_summary.last_7_days_credit_enquiries == 1
    assert record.total_balance == 245000
    assert len(record.active_accounts()) == 2
    assert len(record.closed_accounts()) == 1
