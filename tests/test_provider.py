"""Tests for the ConvertAPI gateway against an in-process httpx transport."""

import logging

import httpx
import pytest

from conftest import RESULT_URL, make_request
from pdf_tools.config import configure_logging
from pdf_tools.errors import DownloadError, ProviderError, ProviderNetworkError, ProviderTimeoutError
from pdf_tools.models import Direction
from pdf_tools.provider import ConvertApiGateway

ENDPOINT = "https://v2.example.test"


def gateway_for(handler) -> ConvertApiGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ConvertApiGateway(client, "s3cret")


@pytest.mark.asyncio
async def test_submit_posts_multipart_with_secret():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"Files": [{"Url": RESULT_URL}]})

    payload = await gateway_for(handler).submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)

    request = seen["request"]
    assert payload["Files"][0]["Url"] == RESULT_URL
    assert request.method == "POST"
    assert request.url.path == "/convert/jpg/to/pdf"
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert "s3cret" not in str(request.url)
    assert request.url.params["StoreFile"] == "true"
    assert request.url.params["Timeout"] == "90"
    body = request.content
    assert b'name="File"; filename="photo.jpg"' in body
    assert b"Content-Type: image/jpeg" in body
    assert b'name="OCR"' not in body
    assert b'name="StoreFile"' not in body
    assert b'name="Timeout"' not in body


@pytest.mark.asyncio
async def test_docx_conversion_sends_text_recognition_flags():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        return httpx.Response(200, json={"Files": [{"Url": RESULT_URL}]})

    req = make_request("a.pdf", "application/pdf", Direction.PDF_TO_FORMAT, "docx")
    await gateway_for(handler).submit(ENDPOINT, "pdf/to/docx", req, 150)

    for field in (b'name="OCR"', b'name="TextRecognition"', b'name="FromPage"', b'name="ToPage"'):
        assert field in seen["body"]


@pytest.mark.asyncio
async def test_unsupported_media_type_is_definitive():
    gateway = gateway_for(lambda request: httpx.Response(415, text="bad input"))
    with pytest.raises(ProviderError) as exc_info:
        await gateway.submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)
    assert exc_info.value.status == 415
    assert not exc_info.value.retryable
    assert "bad input" in exc_info.value.message
    assert "415" in exc_info.value.message


@pytest.mark.asyncio
async def test_server_error_is_retryable():
    gateway = gateway_for(lambda request: httpx.Response(503))
    with pytest.raises(ProviderError) as exc_info:
        await gateway.submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)
    assert exc_info.value.retryable
    assert "503" in exc_info.value.message


@pytest.mark.asyncio
async def test_invalid_json_is_retryable():
    gateway = gateway_for(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(ProviderError) as exc_info:
        await gateway.submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)
    assert exc_info.value.retryable


@pytest.mark.asyncio
async def test_connect_error_maps_to_network_error():
    def handler(request):
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(ProviderNetworkError):
        await gateway_for(handler).submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)


@pytest.mark.asyncio
async def test_read_timeout_maps_to_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ProviderTimeoutError):
        await gateway_for(handler).submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)


@pytest.mark.asyncio
async def test_open_result_streams_success():
    gateway = gateway_for(lambda request: httpx.Response(200, content=b"%PDF-1.4 data"))
    response = await gateway.open_result(RESULT_URL, 60)
    chunks = [chunk async for chunk in response.aiter_bytes()]
    await response.aclose()
    assert b"".join(chunks) == b"%PDF-1.4 data"


@pytest.mark.asyncio
async def test_open_result_failure():
    gateway = gateway_for(lambda request: httpx.Response(404))
    with pytest.raises(DownloadError) as exc_info:
        await gateway.open_result(RESULT_URL, 60)
    assert exc_info.value.status == 404


@pytest.mark.asyncio
async def test_secret_never_reaches_the_logs(caplog):
    httpx_logger = logging.getLogger("httpx")
    saved = httpx_logger.level
    try:
        configure_logging()
        caplog.set_level(logging.INFO)
        gateway = gateway_for(lambda request: httpx.Response(200, json={"Files": [{"Url": RESULT_URL}]}))
        await gateway.submit(ENDPOINT, "jpg/to/pdf", make_request(), 90)
    finally:
        httpx_logger.setLevel(saved)

    assert "answered 200" in caplog.text
    assert "s3cret" not in caplog.text
