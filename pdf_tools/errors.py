# pdf_tools/errors.py
from typing import Optional


class PdfToolsError(Exception):
    """Base exception; ``status_code`` is the HTTP status it maps to."""

    status_code = 500


# ----------------------------
# Validation (never retried)
# ----------------------------
class UploadValidationError(PdfToolsError):
    status_code = 400


class FileTooLargeError(UploadValidationError):
    status_code = 413


# ----------------------------
# Conversion
# ----------------------------
class ConversionError(PdfToolsError):
    status_code = 422

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class UnsupportedFormatError(ConversionError):
    """Requested conversion path is not offered; no provider call is made."""


class ProviderError(ConversionError):
    """The provider answered with a non-success status or an unusable body."""

    @property
    def retryable(self) -> bool:
        if self.status is None:
            return True
        # 408 and 429 are client-range statuses that do succeed on retry
        return not (400 <= self.status < 500) or self.status in (408, 429)


class ProviderNetworkError(ConversionError):
    """Connection-level failure talking to the provider."""


class ProviderTimeoutError(ConversionError):
    """The transport gave up before the provider answered."""


class ConversionTimeoutError(ConversionError):
    """A deadline was exceeded; surfaced immediately, never retried."""


class MissingResultError(ConversionError):
    pass


class DownloadError(ConversionError):
    pass


class ServiceConfigurationError(PdfToolsError):
    status_code = 500


# ----------------------------
# PDF operations
# ----------------------------
class PdfOperationError(PdfToolsError):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
