# pdf_tools/config.py
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple


# ----------------------------
# Paths
# ----------------------------
BASE_DIR = Path(__file__).resolve().parent  # .../pdf_tools
PROJECT_ROOT = BASE_DIR.parent
DATA_DIR = Path(os.environ.get("DATA_DIR", str(PROJECT_ROOT / "data")))
DB_PATH = Path(os.environ.get("DATABASE_PATH", str(DATA_DIR / "users.db")))


# ----------------------------
# App
# ----------------------------
APP_LOCALE = os.environ.get("APP_LOCALE", "en")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

MAX_UPLOAD_MB = int(os.environ.get("MAX_UPLOAD_MB", "10"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

PROCESS_TIMEOUT_SECONDS = float(os.environ.get("PROCESS_TIMEOUT_SECONDS", "30"))
MAX_FREE_CONVERSIONS = int(os.environ.get("MAX_FREE_CONVERSIONS", "3"))


# ----------------------------
# Auth
# ----------------------------
SECRET_KEY = os.environ.get("APP_SECRET_KEY", "dev-secret-change-me")
COOKIE_NAME = "session"
USAGE_COOKIE_NAME = "usage"
SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 7

COOKIE_SECURE = os.environ.get("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

PROTECTED_PREFIXES = ("/dashboard", "/tools")


# ----------------------------
# Conversion provider (ConvertAPI)
# ----------------------------
CONVERTAPI_SECRET_ENV = "CONVERTAPI_SECRET"
DEFAULT_ENDPOINTS = "https://v2.convertapi.com"


def configure_logging() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


class PolicyError(ValueError):
    """Raised when the conversion budgets cannot fit the request deadline."""


@dataclass(frozen=True)
class ConversionPolicy:
    """Retry, fallback and deadline budgets for one conversion request.

    The platform kills a request after ``request_deadline`` seconds. The
    orchestrator may spend at most :attr:`conversion_budget` seconds in
    provider attempts and backoff waits, which leaves room for the result
    download and a safety margin.
    """

    endpoints: Tuple[str, ...] = (DEFAULT_ENDPOINTS,)
    max_attempts: int = 2
    backoff_base: float = 1.0
    document_timeout: float = 150.0
    image_timeout: float = 90.0
    download_timeout: float = 60.0
    request_deadline: float = 300.0
    deadline_margin: float = 10.0
    document_formats: Tuple[str, ...] = field(default=("docx",))

    def __post_init__(self):
        if not self.endpoints:
            raise PolicyError("At least one conversion endpoint is required")
        if self.max_attempts < 1:
            raise PolicyError("max_attempts must be at least 1")
        if self.document_timeout <= self.image_timeout:
            raise PolicyError("Document conversions need a larger deadline than image conversions")
        if self.document_timeout > self.conversion_budget:
            raise PolicyError(
                f"Document deadline {self.document_timeout}s does not fit the "
                f"{self.conversion_budget}s conversion budget"
            )

    @property
    def conversion_budget(self) -> float:
        return self.request_deadline - self.download_timeout - self.deadline_margin

    def timeout_for(self, output_format: str) -> float:
        if output_format in self.document_formats:
            return self.document_timeout
        return self.image_timeout

    def backoff(self, attempt_index: int) -> float:
        return self.backoff_base * (2 ** attempt_index)


def load_policy() -> ConversionPolicy:
    endpoints = tuple(
        u.strip().rstrip("/")
        for u in os.environ.get("CONVERTAPI_ENDPOINTS", DEFAULT_ENDPOINTS).split(",")
        if u.strip()
    )
    return ConversionPolicy(
        endpoints=endpoints,
        max_attempts=int(os.environ.get("CONVERT_MAX_ATTEMPTS", "2")),
        backoff_base=float(os.environ.get("CONVERT_BACKOFF_SECONDS", "1")),
        document_timeout=float(os.environ.get("CONVERT_DOCX_TIMEOUT_SECONDS", "150")),
        image_timeout=float(os.environ.get("CONVERT_IMAGE_TIMEOUT_SECONDS", "90")),
        download_timeout=float(os.environ.get("DOWNLOAD_TIMEOUT_SECONDS", "60")),
        request_deadline=float(os.environ.get("REQUEST_DEADLINE_SECONDS", "300")),
        deadline_margin=float(os.environ.get("DEADLINE_MARGIN_SECONDS", "10")),
    )


def convertapi_secret() -> str:
    return os.environ.get(CONVERTAPI_SECRET_ENV, "")
