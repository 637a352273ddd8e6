import math
import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

from lookup import text_of

#Leading decimal number; anything after it is ignored
NUMBER_PREFIX = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")


def to_number(value: Any) -> float:
    """Parse the numeric prefix of ``value``. Anything absent or non-numeric gives 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else 0
    text = text_of(value)
    if text is None:
        return 0
    match = NUMBER_PREFIX.match(text)
    if not match:
        return 0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0


def to_date(value: Any) -> Optional[date]:
    """Parse ``value`` as a calendar date, or None when it cannot be read as one."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = text_of(value)
    if not text:
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()
