import re
from typing import Any, Dict, Mapping, Optional

from errors import ReportValidationError

PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
REQUIRED_FIELDS = ("name", "mobilePhone", "pan", "creditScore")
MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 900


def normalize_pan(pan: Any) -> Optional[str]:
    if pan is None:
        return None
    return str(pan).strip().upper()


def is_valid_pan(pan: Any) -> bool:
    normalized = normalize_pan(pan)
    return bool(normalized and PAN_PATTERN.match(normalized))


def validate_required_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Final gate for extracted report data.

    Checks presence of the required fields first (reporting all of the missing
    ones together), then the PAN format, then the credit score range. Returns a
    copy of ``data`` with the PAN upper-cased.
    """
    missing = [field_name for field_name in REQUIRED_FIELDS if not data.get(field_name)]
    if missing:
        raise ReportValidationError(f"Missing required fields: {', '.join(missing)}", missing)

    pan = normalize_pan(data["pan"])
    if not PAN_PATTERN.match(pan):
        raise ReportValidationError("Invalid PAN format", ["pan"])

    score = data["creditScore"]
    if score < MIN_CREDIT_SCORE or score > MAX_CREDIT_SCORE:
        raise ReportValidationError(
            f"Credit score must be between {MIN_CREDIT_SCORE} and {MAX_CREDIT_SCORE}", ["creditScore"]
        )

    validated = dict(data)
    validated["pan"] = pan
    return validated
