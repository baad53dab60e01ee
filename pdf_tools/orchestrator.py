# pdf_tools/orchestrator.py
"""
Drives one conversion through the provider.

Endpoints are tried in order; each gets ``policy.max_attempts`` sequential
attempts with exponential backoff between them. A deadline overrun ends the
run immediately, as does a definitive client error from the provider. The
first successful attempt wins.
"""
import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import ConversionPolicy
from .errors import (
    ConversionError,
    ConversionTimeoutError,
    MissingResultError,
    ProviderError,
    ProviderNetworkError,
    ProviderTimeoutError,
    UnsupportedFormatError,
)
from .messages import message
from .models import (
    CONTENT_TYPES,
    AttemptOutcome,
    ConversionAttempt,
    ConversionRequest,
    ConversionResult,
    Direction,
)
from .provider import ConversionGateway

logger = logging.getLogger(__name__)

IMAGE_PATHS = {
    "image/jpeg": "jpg/to/pdf",
    "image/png": "png/to/pdf",
}
DOCUMENT_PATHS = {
    "docx": "pdf/to/docx",
}

_EXTENSION = re.compile(r"\.[^/.]+$")


def resolve_conversion_path(request: ConversionRequest) -> str:
    """Map (direction, format, source type) to the provider's conversion path."""
    fmt = request.target_format
    if request.direction is Direction.IMAGE_TO_PDF:
        path = IMAGE_PATHS.get(request.source.content_type) if fmt == "pdf" else None
    else:
        path = DOCUMENT_PATHS.get(fmt)
    if path is None or request.output_format not in CONTENT_TYPES:
        raise UnsupportedFormatError(message("unsupported_format", format=fmt or "(none)"))
    return path


def output_base_name(filename: str) -> str:
    return _EXTENSION.sub("", filename)


def timeout_message(output_format: str) -> str:
    return message("timeout_document" if output_format == "docx" else "timeout_default")


def extract_result_url(payload: Dict[str, Any]) -> Optional[str]:
    files = payload.get("Files") if isinstance(payload, dict) else None
    if not isinstance(files, list) or not files or not isinstance(files[0], dict):
        return None
    return files[0].get("Url") or None


class ConversionOrchestrator:
    def __init__(
        self,
        gateway: ConversionGateway,
        policy: ConversionPolicy,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._policy = policy
        self._sleep = sleep
        self._clock = clock
        self.attempts: List[ConversionAttempt] = []

    async def run(self, request: ConversionRequest) -> ConversionResult:
        path = resolve_conversion_path(request)
        fmt = request.output_format
        format_timeout = self._policy.timeout_for(fmt)
        started = self._clock()
        last_error: Optional[ConversionError] = None

        logger.info("Starting conversion via %s: %s", path, request.log_context())

        for endpoint in self._policy.endpoints:
            for index in range(self._policy.max_attempts):
                remaining = self._policy.conversion_budget - (self._clock() - started)
                if remaining <= 0:
                    logger.error("Conversion budget spent before attempt %d on %s", index + 1, endpoint)
                    raise ConversionTimeoutError(timeout_message(fmt))

                attempt = ConversionAttempt(endpoint, index, min(format_timeout, remaining))
                self.attempts.append(attempt)
                logger.info(
                    "Trying %s, attempt %d of %d (deadline %.0fs)",
                    endpoint, index + 1, self._policy.max_attempts, attempt.deadline,
                )

                try:
                    payload = await asyncio.wait_for(
                        self._gateway.submit(endpoint, path, request, attempt.deadline),
                        timeout=attempt.deadline,
                    )
                except (asyncio.TimeoutError, ProviderTimeoutError):
                    attempt.outcome = AttemptOutcome.TIMEOUT
                    logger.error(
                        "Attempt %d on %s timed out after %.0fs: %s",
                        index + 1, endpoint, attempt.deadline, request.log_context(),
                    )
                    raise ConversionTimeoutError(timeout_message(fmt))
                except ProviderError as e:
                    if not e.retryable:
                        attempt.outcome = AttemptOutcome.REJECTED
                        logger.error("Provider rejected the request (status %s): %s", e.status, e.message)
                        raise
                    attempt.outcome = AttemptOutcome.TRANSIENT
                    last_error = e
                    logger.warning("Attempt %d on %s failed: %s", index + 1, endpoint, e.message)
                except ProviderNetworkError as e:
                    attempt.outcome = AttemptOutcome.TRANSIENT
                    last_error = e
                    logger.warning("Attempt %d on %s failed: %s", index + 1, endpoint, e.message)
                else:
                    attempt.outcome = AttemptOutcome.SUCCESS
                    logger.info("Conversion request successful on %s", endpoint)
                    return self._result(payload, request)

                if index + 1 < self._policy.max_attempts:
                    await self._backoff(index, started, fmt)

        logger.error("All conversion attempts failed: %s", request.log_context())
        raise last_error or ConversionError(message("all_attempts_failed"))

    async def _backoff(self, index: int, started: float, fmt: str) -> None:
        delay = self._policy.backoff(index)
        remaining = self._policy.conversion_budget - (self._clock() - started)
        if delay >= remaining:
            logger.error("No budget left to retry after %.1fs backoff", delay)
            raise ConversionTimeoutError(timeout_message(fmt))
        await self._sleep(delay)

    def _result(self, payload: Dict[str, Any], request: ConversionRequest) -> ConversionResult:
        url = extract_result_url(payload)
        if not url:
            logger.error("Provider response carried no file URL: %s", request.log_context())
            raise MissingResultError(message("no_file_url"))
        return ConversionResult(
            url=url,
            media_type=request.output_media_type,
            base_name=output_base_name(request.source.filename),
            extension=request.output_format,
        )
