from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from coerce import to_date, to_number
from lookup import KeyPath, as_list, first_text, first_value, resolve
from normalize import normalize_account_status, normalize_account_type, normalize_address_type

NAME_PATHS: Tuple[KeyPath, ...] = (("personalinfo", "name"), ("applicant", "name"), ("name",))
MOBILE_PATHS: Tuple[KeyPath, ...] = (("personalinfo", "mobile"), ("applicant", "mobile"), ("mobile",))
PAN_PATHS: Tuple[KeyPath, ...] = (("personalinfo", "pan"), ("applicant", "pan"), ("pan",))
CREDIT_SCORE_PATHS: Tuple[KeyPath, ...] = (("creditscore",), ("score",), ("credit", "score"))

SUMMARY_PATHS: Dict[str, Tuple[KeyPath, ...]] = {
    "totalAccounts": (
        ("reportsummary", "totalaccounts"), ("summary", "totalaccounts"), ("totalaccounts",),
    ),
    "activeAccounts": (
        ("reportsummary", "activeaccounts"), ("summary", "activeaccounts"), ("activeaccounts",),
    ),
    "closedAccounts": (
        ("reportsummary", "closedaccounts"), ("summary", "closedaccounts"), ("closedaccounts",),
    ),
    "currentBalanceAmount": (
        ("reportsummary", "currentbalanceamount"), ("summary", "currentbalance"), ("currentbalance",),
    ),
    "securedAccountsAmount": (
        ("reportsummary", "securedaccountsamount"), ("summary", "securedamount"), ("securedamount",),
    ),
    "unsecuredAccountsAmount": (
        ("reportsummary", "unsecuredaccountsamount"), ("summary", "unsecuredamount"), ("unsecuredamount",),
    ),
    "last7DaysCreditEnquiries": (
        ("reportsummary", "recentenquiries"), ("summary", "recentenquiries"), ("recentenquiries",),
    ),
}
SUMMARY_COUNT_FIELDS = ("totalAccounts", "activeAccounts", "closedAccounts", "last7DaysCreditEnquiries")

ACCOUNT_CONTAINER_PATHS: Tuple[KeyPath, ...] = (
    ("creditaccounts", "account"),
    ("accounts", "account"),
    ("creditaccounts",),
    ("accounts",),
)
ADDRESS_CONTAINER_PATHS: Tuple[KeyPath, ...] = (
    ("addresses", "address"),
    ("address",),
    ("personalinfo", "addresses", "address"),
)

ACCOUNT_FIELD_SYNONYMS: Dict[str, Tuple[KeyPath, ...]] = {
    "accountNumber": (("accountnumber",), ("account_number",), ("number",)),
    "accountType": (("type",), ("accounttype",)),
    "bankName": (("bankname",), ("bank_name",), ("bank",)),
    "currentBalance": (("currentbalance",),),
    "amountOverdue": (("amountoverdue",),),
    "creditLimit": (("creditlimit",),),
    "accountStatus": (("status",),),
    "openedDate": (("openeddate",), ("opened_date",)),
    "lastPaymentDate": (("lastpaymentdate",), ("last_payment",)),
    "emiAmount": (("emiamount",),),
}

ADDRESS_FIELD_SYNONYMS: Dict[str, Tuple[KeyPath, ...]] = {
    "type": (("type",),),
    "address": (("address",), ("fulladdress",)),
    "city": (("city",),),
    "state": (("state",),),
    "pincode": (("pincode",), ("pin",)),
    "country": (("country",),),
}

NOT_AVAILABLE = "N/A"
UNKNOWN_BANK = "Unknown Bank"
DEFAULT_COUNTRY = "India"


def _first_number(tree: Any, candidates: Sequence[KeyPath]) -> float:
    for path in candidates:
        number = to_number(resolve(tree, path))
        if number:
            return number
    return 0


def _optional_number(tree: Any, candidates: Sequence[KeyPath]) -> Optional[float]:
    return _first_number(tree, candidates) or None


def extract_identity(tree: Mapping[str, Any]) -> Dict[str, Optional[str]]:
    return {
        "name": first_text(tree, NAME_PATHS),
        "mobilePhone": first_text(tree, MOBILE_PATHS),
        "pan": first_text(tree, PAN_PATHS),
    }


def extract_credit_score(tree: Mapping[str, Any]) -> float:
    return _first_number(tree, CREDIT_SCORE_PATHS)


def extract_report_summary(tree: Mapping[str, Any]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {}
    for field_name, candidates in SUMMARY_PATHS.items():
        value = _first_number(tree, candidates)
        summary[field_name] = int(value) if field_name in SUMMARY_COUNT_FIELDS else float(value)
    return summary


def _container_items(tree: Any, container_paths: Sequence[KeyPath]) -> List[Any]:
    # the first container path holding anything is used on its own, even if
    # none of its items turn out to be usable
    for path in container_paths:
        value = resolve(tree, path)
        if value not in (None, ""):
            return as_list(value)
    return []


def _account_record(account: Mapping[str, Any]) -> Dict[str, Any]:
    synonyms = ACCOUNT_FIELD_SYNONYMS
    return {
        "accountNumber": first_text(account, synonyms["accountNumber"]) or NOT_AVAILABLE,
        "accountType": normalize_account_type(first_value(account, synonyms["accountType"])),
        "bankName": first_text(account, synonyms["bankName"]) or UNKNOWN_BANK,
        "currentBalance": float(_first_number(account, synonyms["currentBalance"])),
        "amountOverdue": float(_first_number(account, synonyms["amountOverdue"])),
        "creditLimit": _optional_number(account, synonyms["creditLimit"]),
        "accountStatus": normalize_account_status(first_value(account, synonyms["accountStatus"])),
        "openedDate": to_date(first_value(account, synonyms["openedDate"])),
        "lastPaymentDate": to_date(first_value(account, synonyms["lastPaymentDate"])),
        "emiAmount": _optional_number(account, synonyms["emiAmount"]),
    }


def _address_record(address: Mapping[str, Any]) -> Dict[str, Any]:
    synonyms = ADDRESS_FIELD_SYNONYMS
    return {
        "type": normalize_address_type(first_value(address, synonyms["type"])),
        "address": first_text(address, synonyms["address"]) or NOT_AVAILABLE,
        "city": first_text(address, synonyms["city"]) or "",
        "state": first_text(address, synonyms["state"]) or "",
        "pincode": first_text(address, synonyms["pincode"]) or "",
        "country": first_text(address, synonyms["country"]) or DEFAULT_COUNTRY,
    }


def extract_credit_accounts(tree: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return [
        _account_record(item)
        for item in _container_items(tree, ACCOUNT_CONTAINER_PATHS)
        if isinstance(item, dict)
    ]


def extract_addresses(tree: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return [
        _address_record(item)
        for item in _container_items(tree, ADDRESS_CONTAINER_PATHS)
        if isinstance(item, dict)
    ]


def extract_credit_data(tree: Mapping[str, Any]) -> Dict[str, Any]:
    data: Dict[str, Any] = dict(extract_identity(tree))
    data["creditScore"] = extract_credit_score(tree)
    data["reportSummary"] = extract_report_summary(tree)
    data["creditAccounts"] = extract_credit_accounts(tree)
    data["addresses"] = extract_addresses(tree)
    return data
