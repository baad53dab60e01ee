"""Shared test fixtures for PDF Tools."""

import asyncio
import io
from typing import Any, List

import httpx
import pytest
from PyPDF2 import PdfWriter

from pdf_tools.config import ConversionPolicy
from pdf_tools.models import ConversionRequest, Direction, SourceFile


RESULT_URL = "https://files.example.test/results/abc123"


def make_pdf(pages: int = 1) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_request(
    filename: str = "photo.jpg",
    content_type: str = "image/jpeg",
    direction: Direction = Direction.IMAGE_TO_PDF,
    target_format: str = "pdf",
    data: bytes = b"\xff\xd8\xff\xe0fake-jpeg",
) -> ConversionRequest:
    return ConversionRequest(
        source=SourceFile(filename=filename, content_type=content_type, data=data),
        direction=direction,
        target_format=target_format,
    )


class FakeGateway:
    """Scripted stand-in for the provider.

    Each script entry is used for one ``submit`` call: a dict is returned as
    the provider JSON, an exception is raised, and ``"hang"`` blocks until
    cancelled.
    """

    def __init__(self, script: List[Any], on_call=None):
        self.script = list(script)
        self.calls = []
        self.cancelled = 0
        self.on_call = on_call

    async def submit(self, endpoint, conversion_path, request, timeout):
        self.calls.append((endpoint, conversion_path, timeout))
        if self.on_call:
            self.on_call()
        step = self.script.pop(0) if self.script else {"Files": [{"Url": RESULT_URL}]}
        if step == "hang":
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(step, Exception):
            raise step
        return step

    async def open_result(self, url, timeout):
        return httpx.Response(200, content=b"%PDF-1.4 converted")


class SleepRecorder:
    def __init__(self, clock=None):
        self.delays: List[float] = []
        self.clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.clock is not None:
            self.clock.advance(delay)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fast_policy():
    return ConversionPolicy(
        endpoints=("https://v1.example.test", "https://v2.example.test", "https://api.example.test"),
        max_attempts=3,
        backoff_base=1.0,
        document_timeout=0.2,
        image_timeout=0.05,
    )


@pytest.fixture
def single_endpoint_policy():
    return ConversionPolicy(
        endpoints=("https://v2.example.test",),
        max_attempts=2,
        backoff_base=0.0,
        document_timeout=5.0,
        image_timeout=2.0,
    )


@pytest.fixture
def sleeper():
    return SleepRecorder()
