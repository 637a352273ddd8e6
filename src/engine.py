import logging
import math
from typing import Any, Dict, Optional

from creditparser import ParseResult, parse_credit_report
from database import ReportStore
from models import LIST_VIEW_EXCLUDE, CreditReportRecord
from validate import normalize_pan

logger = logging.getLogger(__name__)


def process_xml_bytes(xml_bytes: bytes, file_name: str, store: ReportStore) -> ParseResult:
    """Extract a report from an upload and persist it when extraction succeeds."""
    result = parse_credit_report(xml_bytes, file_name, log=logger)
    if not result.success:
        return result
    result.record = store.save(result.record)
    logger.info("Credit report %s saved for PAN: %s", result.record.id, result.record.pan)
    return result


def pagination_block(page: int, limit: int, total_count: int) -> Dict[str, Any]:
    total_pages = math.ceil(total_count / limit) if limit else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalCount": total_count,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
        "limit": limit,
    }


def list_reports(store: ReportStore, page: int = 1, limit: int = 10, sort_by: str = "createdAt",
                 sort_order: str = "desc") -> Dict[str, Any]:
    total_count = store.count_documents()
    skip = (page - 1) * limit
    reports = store.find(sort_by=sort_by, sort_order=sort_order, skip=skip, limit=limit)
    return {
        "reports": [r.to_json_dict(exclude=LIST_VIEW_EXCLUDE) for r in reports],
        "pagination": pagination_block(page, limit, total_count),
    }


def reports_for_pan(store: ReportStore, pan: str) -> Dict[str, Any]:
    wanted = normalize_pan(pan)
    reports = store.find_by_pan(wanted)
    return {
        "pan": wanted,
        "reports": [r.to_json_dict() for r in reports],
        "count": len(reports),
    }


def latest_report_for_pan(store: ReportStore, pan: str) -> Optional[CreditReportRecord]:
    return store.find_latest_by_pan(normalize_pan(pan))


def delete_report(store: ReportStore, report_id: str) -> Optional[CreditReportRecord]:
    report = store.find_by_id_and_delete(report_id)
    if report is not None:
        logger.info("Credit report deleted: %s", report.id)
    return report
