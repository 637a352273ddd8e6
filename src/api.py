import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from fastapi import Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_config
from database import ReportStore, get_store, warm_database
from engine import delete_report, latest_report_for_pan, list_reports, process_xml_bytes, reports_for_pan
from validate import is_valid_pan

logger = logging.getLogger(__name__)
config = get_config()

PREFIX = "/api/credit-reports"

app = FastAPI(title="Credit Report API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.api.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

@app.on_event("startup")
def startup_warm():
    logger.info("Report storage status: %s", warm_database())

@app.middleware("http")
async def log_requests(request: Request, call_next):
    client_host = request.client.host if request.client else None
    logger.info("%s %s (client %s)", request.method, request.url.path, client_host)
    return await call_next(request)

def _fail(status_code: int, message: str, error=None, **extra) -> JSONResponse:
    content = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)

def _server_error(message: str, e: Exception) -> JSONResponse:
    logger.error(message, exc_info=True)
    return _fail(500, message, str(e) if config.api.debug else "Something went wrong")

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p not in ("query", "path", "body"))
        errors.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return _fail(400, "Invalid request parameters", "INVALID_REQUEST", errors=errors)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _fail(404, "API endpoint not found", "NOT_FOUND", path=request.url.path)
    return _fail(exc.status_code, str(exc.detail), "HTTP_ERROR", path=request.url.path)

def _is_allowed_file(upload: UploadFile) -> bool:
    upload_cfg = config.upload
    if (upload.content_type or "").lower() in upload_cfg.allowed_mime_types:
        return True
    return Path(upload.filename or "").suffix.lower() in upload_cfg.allowed_extensions

def _is_report_id(report_id: str) -> bool:
    return report_id.strip().isdigit()

def _invalid_pan() -> JSONResponse:
    return _fail(400, "Invalid PAN format", "INVALID_PAN", errors=["PAN must be in format: ABCDE1234F"])

@app.get("/")
def root():
    return {
        "success": True,
        "message": "Welcome to the Credit Report API",
        "version": app.version,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "upload": f"POST {PREFIX}/upload",
            "getAllReports": f"GET {PREFIX}",
            "getReportById": f"GET {PREFIX}/:id",
            "getReportsByPAN": f"GET {PREFIX}/pan/:pan",
            "getLatestReportByPAN": f"GET {PREFIX}/pan/:pan/latest",
            "deleteReport": f"DELETE {PREFIX}/:id",
        },
    }

@app.get("/health")
def health():
    return {
        "success": True,
        "message": "Credit report API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

@app.get("/ready")
def ready(store: ReportStore = Depends(get_store)):
    return warm_database(store)

@app.post(f"{PREFIX}/upload", status_code=201)
async def upload_report(
    xml_file: Optional[UploadFile] = File(None, alias="xmlFile"),
    store: ReportStore = Depends(get_store),
):
    if xml_file is None:
        return _fail(400, "No file uploaded. Please select an XML file.", "NO_FILE")
    file_name = xml_file.filename or "upload.xml"
    if not _is_allowed_file(xml_file):
        return _fail(400, "Invalid file type. Only XML files are allowed.", "INVALID_FILE_TYPE")

    limit = config.upload.max_bytes
    xml_bytes = await xml_file.read(limit + 1)
    if not xml_bytes:
        return _fail(400, "Uploaded file is empty.", "EMPTY_FILE")
    if len(xml_bytes) > limit:
        return _fail(413, f"File too large. Maximum size is {config.upload.max_file_mb}MB.", "FILE_TOO_LARGE")
    logger.info("File uploaded: %s, Size: %d bytes", file_name, len(xml_bytes))

    try:
        result = process_xml_bytes(xml_bytes, file_name, store)
    except Exception as e:
        return _server_error("Internal server error while processing XML file", e)

    if not result.success:
        return _fail(
            400,
            "Failed to parse XML file",
            result.error,
            errorType=result.error_type,
            fields=result.fields,
            fileName=file_name,
        )

    record = result.record
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "XML file processed and credit report saved successfully",
            "data": {
                "reportId": record.id,
                "pan": record.pan,
                "name": record.name,
                "creditScore": record.credit_score,
                "reportDate": record.report_date.isoformat(),
                "fileName": file_name,
            },
        },
    )

@app.get(PREFIX)
def get_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Literal["createdAt", "reportDate", "creditScore"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    store: ReportStore = Depends(get_store),
):
    try:
        data = list_reports(store, page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    except Exception as e:
        return _server_error("Internal server error while fetching credit reports", e)
    return {"success": True, "data": data}

@app.get(PREFIX + "/pan/{pan}")
def get_reports_by_pan(pan: str, store: ReportStore = Depends(get_store)):
    if not is_valid_pan(pan):
        return _invalid_pan()
    try:
        data = reports_for_pan(store, pan)
    except Exception as e:
        return _server_error("Internal server error while fetching credit reports", e)
    return {"success": True, "data": data}

@app.get(PREFIX + "/pan/{pan}/latest")
def get_latest_report_by_pan(pan: str, store: ReportStore = Depends(get_store)):
    if not is_valid_pan(pan):
        return _invalid_pan()
    try:
        report = latest_report_for_pan(store, pan)
    except Exception as e:
        return _server_error("Internal server error while fetching credit report", e)
    if report is None:
        return _fail(404, "No credit report found for this PAN", "REPORT_NOT_FOUND")
    return {"success": True, "data": report.to_json_dict()}

@app.get(PREFIX + "/{report_id}")
def get_report(report_id: str, store: ReportStore = Depends(get_store)):
    if not _is_report_id(report_id):
        return _fail(400, "Invalid report ID format", "INVALID_ID")
    try:
        report = store.find_by_id(report_id.strip())
    except Exception as e:
        return _server_error("Internal server error while fetching credit report", e)
    if report is None:
        return _fail(404, "Credit report not found", "REPORT_NOT_FOUND")
    return {"success": True, "data": report.to_json_dict()}

@app.delete(PREFIX + "/{report_id}")
def remove_report(report_id: str, store: ReportStore = Depends(get_store)):
    if not _is_report_id(report_id):
        return _fail(400, "Invalid report ID format", "INVALID_ID")
    try:
        report = delete_report(store, report_id.strip())
    except Exception as e:
        return _server_error("Internal server error while deleting credit report", e)
    if report is None:
        return _fail(404, "Credit report not found", "REPORT_NOT_FOUND")
    return {
        "success": True,
        "message": "Credit report deleted successfully",
        "data": {"deletedId": report.id, "pan": report.pan},
    }
