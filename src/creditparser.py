import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from errors import CreditReportError, ExtractionError
from extract import extract_credit_data
from models import CreditReportRecord
from validate import validate_required_fields
from xmltree import parse_xml_tree

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    success: bool
    file_name: str
    record: Optional[CreditReportRecord] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "fileName": self.file_name, "data": self.record.to_json_dict()}
        return {
            "success": False,
            "fileName": self.file_name,
            "error": self.error,
            "errorType": self.error_type,
            "fields": list(self.fields),
        }


def _build_record(data: Dict[str, Any], file_name: str) -> CreditReportRecord:
    payload = dict(data)
    payload["creditScore"] = int(payload["creditScore"])
    payload["xmlFileName"] = file_name
    payload["processingStatus"] = "completed"
    payload["reportDate"] = datetime.now(timezone.utc)
    try:
        return CreditReportRecord.model_validate(payload)
    except ValidationError as e:
        raise ExtractionError(f"Data extraction failed: {e}") from e


def parse_credit_report(xml_bytes: bytes, file_name: str = "", log: Optional[logging.Logger] = None) -> ParseResult:
    """Run one upload through parse, extract and validate.

    Never raises for bad input: syntax, extraction and validation failures come
    back as an unsuccessful ParseResult carrying the reason.
    """
    log = log or logger
    try:
        tree = parse_xml_tree(xml_bytes)
        log.info("Successfully parsed XML file: %s", file_name)
        try:
            data = extract_credit_data(tree)
        except Exception as e:
            log.error("Error extracting credit data from %s", file_name, exc_info=True)
            raise ExtractionError(f"Data extraction failed: {e}") from e
        data = validate_required_fields(data)
        record = _build_record(data, file_name)
    except CreditReportError as e:
        log.error("Error processing XML file %s [%s]: %s", file_name, e.kind, e.message)
        return ParseResult(
            success=False,
            file_name=file_name,
            error=e.message,
            error_type=e.kind,
            fields=list(getattr(e, "fields", [])),
        )

    log.info(
        "Extracted report for PAN %s from %s: %d accounts, %d addresses",
        record.pan, file_name, len(record.credit_accounts), len(record.addresses),
    )
    return ParseResult(success=True, file_name=file_name, record=record)
