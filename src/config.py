from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache

def _env(name: str, default=None, cast=str):
    val = os.getenv(name, default)
    if val is None:
        return None
    if cast is bool:
        return str(val).strip().lower() in {"1", "true", "yes", "on"}
    if cast in (int, float):
        try:
            return cast(val)
        except Exception:
            return cast(default) if default is not None else None
    return str(val)

def _env_list(name: str, default: str) -> tuple:
    raw = _env(name, default) or ""
    return tuple(part.strip() for part in raw.split(",") if part.strip())

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(_env("CREDIT_DATA_DIR", str(BASE_DIR / "data")))
DB_PATH  = Path(_env("CREDIT_DB_PATH",  str(DATA_DIR / "credit_reports.db")))
LOG_DIR  = Path(_env("CREDIT_LOG_DIR",  str(DATA_DIR / "logs")))

@dataclass(frozen=True)
class ApiConfig:
    host: str = _env("CREDIT_API_HOST", "0.0.0.0")
    port: int = _env("CREDIT_API_PORT", 5000, int)
    debug: bool = _env("CREDIT_DEBUG", False, bool)
    cors_origins: tuple = _env_list("CREDIT_FRONTEND_URL", "http://localhost:5173")

@dataclass(frozen=True)
class PathsConfig:
    BASE_DIR: Path = BASE_DIR
    DATA_DIR: Path = DATA_DIR
    DB_PATH: Path = DB_PATH
    LOG_DIR: Path = LOG_DIR

@dataclass(frozen=True)
class StorageConfig:
    #"sqlite" keeps reports on disk, "memory" keeps them for the life of the process
    backend: str = (_env("CREDIT_STORAGE", "sqlite") or "sqlite").strip().lower()

@dataclass(frozen=True)
class UploadConfig:
    max_file_mb: int = _env("CREDIT_MAX_FILE_MB", 10, int)
    field_name: str = "xmlFile"
    allowed_mime_types: tuple = ("application/xml", "text/xml", "application/xml-dtd", "text/plain")
    allowed_extensions: tuple = (".xml",)

    @property
    def max_bytes(self) -> int:
        return self.max_file_mb * 1048576

@dataclass(frozen=True)
class LoggingConfig:
    level: str = (_env("CREDIT_LOG_LEVEL", "INFO") or "INFO").upper()
    to_file: bool = _env("CREDIT_LOG_TO_FILE", False, bool)

@dataclass(frozen=True)
class AppConfig:
    api: "ApiConfig" = field(default_factory=lambda: ApiConfig())
    paths: "PathsConfig" = field(default_factory=lambda: PathsConfig())
    storage: "StorageConfig" = field(default_factory=lambda: StorageConfig())
    upload: "UploadConfig" = field(default_factory=lambda: UploadConfig())
    logging: "LoggingConfig" = field(default_factory=lambda: LoggingConfig())

@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    return AppConfig()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

def configure_logging(cfg: AppConfig | None = None) -> None:
    cfg = cfg or get_config()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.logging.to_file:
        cfg.paths.LOG_DIR.mkdir(parents=True, exist_ok=True)
        error_handler = logging.FileHandler(cfg.paths.LOG_DIR / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(logging.FileHandler(cfg.paths.LOG_DIR / "combined.log", encoding="utf-8"))
        handlers.append(error_handler)
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

config = get_config()
