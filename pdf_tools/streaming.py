# pdf_tools/streaming.py
import asyncio
import logging
from urllib.parse import quote

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from .errors import ConversionTimeoutError, ProviderTimeoutError
from .messages import message
from .models import ConversionResult
from .provider import ConversionGateway

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Cache-Control": "no-cache",
}

# Same set encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_filename(name: str) -> str:
    return quote(name, safe=_URI_COMPONENT_SAFE)


def content_disposition(base_name: str, extension: str) -> str:
    encoded = encode_filename(base_name)
    return f"attachment; filename=\"{encoded}.{extension}\"; filename*=UTF-8''{encoded}.{extension}"


def download_headers(result: ConversionResult) -> dict:
    return {
        **CORS_HEADERS,
        "Content-Disposition": content_disposition(result.base_name, result.extension),
    }


async def _relay(upstream: httpx.Response, filename: str):
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    except httpx.HTTPError:
        # headers are already sent, so the client sees a truncated download
        logger.exception("Download of %s broke off mid-stream", filename)
        raise
    finally:
        await upstream.aclose()


async def stream_result(
    gateway: ConversionGateway,
    result: ConversionResult,
    timeout: float,
) -> StreamingResponse:
    """Open the converted artifact and relay it without buffering it whole."""
    logger.info("Downloading converted file %s", result.filename)
    try:
        upstream = await asyncio.wait_for(gateway.open_result(result.url, timeout), timeout=timeout)
    except (asyncio.TimeoutError, ProviderTimeoutError):
        logger.error("Download of %s timed out after %.0fs", result.filename, timeout)
        raise ConversionTimeoutError(message("timeout_download"))

    return StreamingResponse(
        _relay(upstream, result.filename),
        media_type=result.media_type,
        headers=download_headers(result),
        background=BackgroundTask(upstream.aclose),
    )
