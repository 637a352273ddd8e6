import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from config import get_config
from models import CreditReportRecord

logger = logging.getLogger(__name__)

#API sort key -> record attribute / sqlite column
SORT_FIELDS = {
    "createdAt": "created_at",
    "reportDate": "report_date",
    "creditScore": "credit_score",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _row_id(report_id) -> Optional[int]:
    text = str(report_id if report_id is not None else "").strip()
    return int(text) if text.isdigit() else None


def _sort_column(sort_by: str) -> str:
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"unsupported sort field: {sort_by}")
    return SORT_FIELDS[sort_by]


class InMemoryReportStore:
    """Reports kept in a dict for the life of the process."""

    backend = "memory"

    def __init__(self):
        self._reports: Dict[str, CreditReportRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def save(self, record: CreditReportRecord) -> CreditReportRecord:
        now = _utcnow()
        with self._lock:
            update = {"updated_at": now}
            if record.id is None:
                update["id"] = str(self._next_id)
                update["created_at"] = now
                self._next_id += 1
            stored = record.model_copy(update=update)
            self._reports[stored.id] = stored
        return stored

    def find_by_id(self, report_id) -> Optional[CreditReportRecord]:
        row_id = _row_id(report_id)
        if row_id is None:
            return None
        return self._reports.get(str(row_id))

    def find(self, sort_by: str = "createdAt", sort_order: str = "desc", skip: int = 0,
             limit: Optional[int] = None) -> List[CreditReportRecord]:
        attribute = _sort_column(sort_by)
        with self._lock:
            reports = list(self._reports.values())
        reports.sort(key=lambda r: (getattr(r, attribute), int(r.id)), reverse=(sort_order == "desc"))
        end = None if limit is None else skip + limit
        return reports[skip:end]

    def count_documents(self) -> int:
        return len(self._reports)

    def find_by_pan(self, pan: str) -> List[CreditReportRecord]:
        wanted = (pan or "").strip().upper()
        with self._lock:
            matches = [r for r in self._reports.values() if r.pan == wanted]
        matches.sort(key=lambda r: (r.report_date, int(r.id)), reverse=True)
        return matches

    def find_latest_by_pan(self, pan: str) -> Optional[CreditReportRecord]:
        matches = self.find_by_pan(pan)
        return matches[0] if matches else None

    def find_by_id_and_delete(self, report_id) -> Optional[CreditReportRecord]:
        row_id = _row_id(report_id)
        if row_id is None:
            return None
        with self._lock:
            return self._reports.pop(str(row_id), None)


class SqliteReportStore:
    """Reports stored as JSON documents in a SQLite table.

    The sortable and searchable fields are copied into their own columns; the
    full record lives in ``document``.
    """

    backend = "sqlite"

    def __init__(self, db_path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._connection() as conn:
            cur = conn.cursor()
            cur.execute("""
                CREATE TABLE IF NOT EXISTS credit_reports (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    pan TEXT NOT NULL,
                    mobile_phone TEXT,
                    credit_score INTEGER NOT NULL,
                    report_date TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    document TEXT NOT NULL
                )
            """)
            cur.execute("CREATE INDEX IF NOT EXISTS idx_credit_reports_pan ON credit_reports(pan)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_credit_reports_mobile ON credit_reports(mobile_phone)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_credit_reports_created ON credit_reports(created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_credit_reports_report_date ON credit_reports(report_date)")

    @staticmethod
    def _from_row(row) -> CreditReportRecord:
        return CreditReportRecord.model_validate_json(row["document"])

    def save(self, record: CreditReportRecord) -> CreditReportRecord:
        now = _utcnow()
        with self._connection() as conn:
            cur = conn.cursor()
            row_id = _row_id(record.id)
            if row_id is None:
                stored = record.model_copy(update={"created_at": now, "updated_at": now})
                cur.execute(
                    "INSERT INTO credit_reports (pan, mobile_phone, credit_score, report_date, created_at, updated_at, document) "
                    "VALUES (?, ?, ?, ?, ?, ?, '{}')",
                    (stored.pan, stored.mobile_phone, stored.credit_score, _ts(stored.report_date),
                     _ts(stored.created_at), _ts(stored.updated_at)),
                )
                stored = stored.model_copy(update={"id": str(cur.lastrowid)})
            else:
                stored = record.model_copy(update={"updated_at": now})
            cur.execute(
                "UPDATE credit_reports SET pan=?, mobile_phone=?, credit_score=?, report_date=?, updated_at=?, document=? "
                "WHERE id=?",
                (stored.pan, stored.mobile_phone, stored.credit_score, _ts(stored.report_date),
                 _ts(stored.updated_at), stored.model_dump_json(by_alias=True), int(stored.id)),
            )
        return stored

    def find_by_id(self, report_id) -> Optional[CreditReportRecord]:
        row_id = _row_id(report_id)
        if row_id is None:
            return None
        with self._connection() as conn:
            row = conn.execute("SELECT document FROM credit_reports WHERE id=?", (row_id,)).fetchone()
        return self._from_row(row) if row else None

    def find(self, sort_by: str = "createdAt", sort_order: str = "desc", skip: int = 0,
             limit: Optional[int] = None) -> List[CreditReportRecord]:
        column = _sort_column(sort_by)
        direction = "DESC" if sort_order == "desc" else "ASC"
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT document FROM credit_reports ORDER BY {column} {direction}, id {direction} LIMIT ? OFFSET ?",
                (-1 if limit is None else int(limit), int(skip)),
            ).fetchall()
        return [self._from_row(r) for r in rows]

    def count_documents(self) -> int:
        with self._connection() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM credit_reports").fetchone()
        return int(n or 0)

    def find_by_pan(self, pan: str) -> List[CreditReportRecord]:
        wanted = (pan or "").strip().upper()
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT document FROM credit_reports WHERE pan=? ORDER BY report_date DESC, id DESC",
                (wanted,),
            ).fetchall()
        return [self._from_row(r) for r in rows]

    def find_latest_by_pan(self, pan: str) -> Optional[CreditReportRecord]:
        matches = self.find_by_pan(pan)
        return matches[0] if matches else None

    def find_by_id_and_delete(self, report_id) -> Optional[CreditReportRecord]:
        row_id = _row_id(report_id)
        if row_id is None:
            return None
        with self._connection() as conn:
            row = conn.execute("SELECT document FROM credit_reports WHERE id=?", (row_id,)).fetchone()
            if row is None:
                return None
            conn.execute("DELETE FROM credit_reports WHERE id=?", (row_id,))
        return self._from_row(row)


ReportStore = Union[SqliteReportStore, InMemoryReportStore]


@lru_cache(maxsize=1)
def get_store() -> ReportStore:
    cfg = get_config()
    if cfg.storage.backend == "memory":
        logger.info("Using in-memory report storage")
        return InMemoryReportStore()
    try:
        store = SqliteReportStore(cfg.paths.DB_PATH)
    except (sqlite3.Error, OSError):
        logger.warning("SQLite storage unavailable at %s; using in-memory storage", cfg.paths.DB_PATH, exc_info=True)
        return InMemoryReportStore()
    logger.info("Using SQLite report storage at %s", cfg.paths.DB_PATH)
    return store


def warm_database(store: Optional[ReportStore] = None):
    store = store or get_store()
    try:
        count = store.count_documents()
    except sqlite3.Error as e:
        return {"ready": False, "backend": store.backend, "reason": "operational_error", "error": str(e)}
    return {"ready": True, "backend": store.backend, "reports": count}
