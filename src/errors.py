from __future__ import annotations

from typing import Iterable, List


class CreditReportError(Exception):
    """Base class for failures raised while turning an XML upload into a report."""

    kind: str = "extraction-error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ReportSyntaxError(CreditReportError):
    """The upload could not be decoded or parsed as XML."""

    kind = "syntax-error"


class ExtractionError(CreditReportError):
    """Walking the parsed tree failed on an unexpected shape."""

    kind = "extraction-error"


class ReportValidationError(CreditReportError):
    """Extracted values break a business rule. ``fields`` names the offenders."""

    kind = "validation-error"

    def __init__(self, message: str, fields: Iterable[str] = ()):
        super().__init__(message)
        self.fields: List[str] = list(fields)
