from datetime import date

import pytest

from extract import (
    extract_addresses,
    extract_credit_accounts,
    extract_credit_data,
    extract_credit_score,
    extract_identity,
    extract_report_summary,
)
from normalize import normalize_account_status, normalize_account_type, normalize_address_type


def test_identity_prefers_personal_info():
    tree = {
        "personalinfo": {"name": "A", "mobile": "1", "pan": "p"},
        "applicant": {"name": "B"},
        "name": "C",
    }
    assert extract_identity(tree) == {"name": "A", "mobilePhone": "1", "pan": "p"}


def test_identity_falls_back_to_applicant_then_root():
    tree = {"personalinfo": {"name": ""}, "applicant": {"name": "B"}, "mobile": "99"}
    assert extract_identity(tree) == {"name": "B", "mobilePhone": "99", "pan": None}


def test_credit_score_fallbacks():
    assert extract_credit_score({"credit": {"score": "701"}}) == 701
    # non-numeric first candidate coerces to 0 and falls through
    assert extract_credit_score({"creditscore": "abc", "score": "650"}) == 650
    assert extract_credit_score({}) == 0


def test_summary_defaults_to_zero():
    summary = extract_report_summary({})
    assert set(summary) == {
        "totalAccounts", "activeAccounts", "closedAccounts", "currentBalanceAmount",
        "securedAccountsAmount", "unsecuredAccountsAmount", "last7DaysCreditEnquiries",
    }
    assert all(v == 0 for v in summary.values())


def test_summary_reads_each_tier():
    tree = {
        "summary": {"totalaccounts": "4", "currentbalance": "1200.5"},
        "recentenquiries": "2",
        "reportsummary": {"closedaccounts": "1"},
    }
    summary = extract_report_summary(tree)
    assert summary["totalAccounts"] == 4
    assert summary["closedAccounts"] == 1
    assert summary["currentBalanceAmount"] == 1200.5
    assert summary["last7DaysCreditEnquiries"] == 2
    assert summary["activeAccounts"] == 0


def test_single_account_becomes_list():
    tree = {"accounts": {"account": {
        "accountnumber": "A1", "bankname": "HDFC", "type": "Auto Loan", "currentbalance": "5000",
    }}}
    accounts = extract_credit_accounts(tree)
    assert accounts == [{
        "accountNumber": "A1",
        "accountType": "auto_loan",
        "bankName": "HDFC",
        "currentBalance": 5000.0,
        "amountOverdue": 0.0,
        "creditLimit": None,
        "accountStatus": "active",
        "openedDate": None,
        "lastPaymentDate": None,
        "emiAmount": None,
    }]


def test_account_synonyms_and_non_mapping_items():
    tree = {"creditaccounts": {"account": [
        {"account_number": "X", "bank": "SBI", "opened_date": "2020-01-02", "last_payment": "2024-02-03",
         "creditlimit": "50000", "emiamount": "1500"},
        "junk",
    ]}}
    accounts = extract_credit_accounts(tree)
    assert len(accounts) == 1
    account = accounts[0]
    assert account["accountNumber"] == "X"
    assert account["bankName"] == "SBI"
    assert account["openedDate"] == date(2020, 1, 2)
    assert account["lastPaymentDate"] == date(2024, 2, 3)
    assert account["creditLimit"] == 50000.0
    assert account["emiAmount"] == 1500.0


def test_account_sentinels():
    accounts = extract_credit_accounts({"creditaccounts": {"account": {"status": "Written Off"}}})
    assert accounts[0]["accountNumber"] == "N/A"
    assert accounts[0]["bankName"] == "Unknown Bank"
    assert accounts[0]["accountType"] == "other"
    assert accounts[0]["accountStatus"] == "written_off"


def test_first_account_container_wins_even_if_unusable():
    tree = {
        "creditaccounts": {"account": "not-a-mapping"},
        "accounts": {"account": {"accountnumber": "B2"}},
    }
    assert extract_credit_accounts(tree) == []


def test_no_accounts_or_addresses():
    assert extract_credit_accounts({"name": "x"}) == []
    assert extract_addresses({"name": "x"}) == []


def test_address_defaults():
    tree = {"addresses": {"address": {"type": "Previous Address", "fulladdress": "1 Lane", "pin": "400001"}}}
    assert extract_addresses(tree) == [{
        "type": "previous",
        "address": "1 Lane",
        "city": "",
        "state": "",
        "pincode": "400001",
        "country": "India",
    }]


def test_addresses_under_personal_info():
    tree = {"personalinfo": {"addresses": {"address": [{"address": "a"}, {"address": "b", "country": "Nepal"}]}}}
    addresses = extract_addresses(tree)
    assert [a["address"] for a in addresses] == ["a", "b"]
    assert [a["country"] for a in addresses] == ["India", "Nepal"]
    assert all(a["type"] == "current" for a in addresses)


def test_extract_credit_data_shape():
    data = extract_credit_data({"name": "A", "mobile": "1", "pan": "ABCDE1234F", "score": "700"})
    assert data["creditScore"] == 700
    assert data["creditAccounts"] == []
    assert data["addresses"] == []
    assert data["reportSummary"]["totalAccounts"] == 0


@pytest.mark.parametrize("raw,expected", [
    ("Credit Card", "credit_card"),
    ("HOUSING LOAN", "home_loan"),
    ("Home Loan", "home_loan"),
    ("Personal Loan", "personal_loan"),
    ("Two Wheeler Vehicle Loan", "auto_loan"),
    ("foo", "other"),
    ("", "other"),
    (None, "other"),
])
def test_normalize_account_type(raw, expected):
    assert normalize_account_type(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("Closed", "closed"),
    ("TERMINATED", "closed"),
    ("Suspended", "suspended"),
    ("Written-Off", "written_off"),
    ("Standard", "active"),
    (None, "active"),
])
def test_normalize_account_status(raw, expected):
    assert normalize_account_status(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("Previous", "previous"),
    ("past address", "previous"),
    ("Permanent", "permanent"),
    ("Residence", "current"),
    (None, "current"),
])
def test_normalize_address_type(raw, expected):
    assert normalize_address_type(raw) == expected


def test_first_address_container_wins_even_if_unusable():
    tree = {
        "addresses": {"address": "not-a-mapping"},
        "personalinfo": {"addresses": {"address": {"address": "1 Lane", "city": "Pune"}}},
    }
    assert extract_addresses(tree) == []
