from typing import Any, Optional, Sequence, Tuple

from lookup import text_of

ACCOUNT_TYPES = ("credit_card", "personal_loan", "home_loan", "auto_loan", "other")
ACCOUNT_STATUSES = ("active", "closed", "suspended", "written_off")
ADDRESS_TYPES = ("current", "previous", "permanent")

#Checked in order, first match wins
ACCOUNT_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("credit", "card"), "credit_card"),
    (("personal",), "personal_loan"),
    (("home", "housing"), "home_loan"),
    (("auto", "vehicle"), "auto_loan"),
)

ACCOUNT_STATUS_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("closed", "terminated"), "closed"),
    (("suspended",), "suspended"),
    (("written", "off"), "written_off"),
)

ADDRESS_TYPE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("prev", "past"), "previous"),
    (("perm",), "permanent"),
)


def _match_rules(value: Any, rules: Sequence[Tuple[Tuple[str, ...], str]], default: str) -> str:
    text: Optional[str] = text_of(value)
    if not text:
        return default
    lowered = text.lower()
    for needles, label in rules:
        if any(needle in lowered for needle in needles):
            return label
    return default


def normalize_account_type(value: Any) -> str:
    return _match_rules(value, ACCOUNT_TYPE_RULES, "other")


def normalize_account_status(value: Any) -> str:
    return _match_rules(value, ACCOUNT_STATUS_RULES, "active")


def normalize_address_type(value: Any) -> str:
    return _match_rules(value, ADDRESS_TYPE_RULES, "current")
