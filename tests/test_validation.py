"""Tests for upload validation."""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from pdf_tools.errors import FileTooLargeError, UploadValidationError
from pdf_tools.models import Direction
from pdf_tools.validation import parse_direction, validate_upload

MB = 1024 * 1024


def upload(filename: str, content_type: str, data: bytes, declare_size: bool = True) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        size=len(data) if declare_size else None,
        headers=Headers({"content-type": content_type}),
    )


def test_parse_direction():
    assert parse_direction("true") is Direction.IMAGE_TO_PDF
    assert parse_direction("false") is Direction.PDF_TO_FORMAT
    assert parse_direction(None) is Direction.PDF_TO_FORMAT


@pytest.mark.asyncio
async def test_accepts_jpeg_for_image_to_pdf():
    data = b"\xff\xd8" + b"0" * (2 * MB)
    req = await validate_upload(upload("photo.jpg", "image/jpeg", data), "pdf", Direction.IMAGE_TO_PDF)
    assert req.source.size == len(data)
    assert req.source.filename == "photo.jpg"
    assert req.output_format == "pdf"


@pytest.mark.asyncio
async def test_accepts_pdf_for_pdf_to_docx():
    req = await validate_upload(upload("a.pdf", "application/pdf", b"%PDF-1.4"), "docx", Direction.PDF_TO_FORMAT)
    assert req.output_format == "docx"


@pytest.mark.asyncio
async def test_missing_file():
    with pytest.raises(UploadValidationError) as exc_info:
        await validate_upload(None, "pdf", Direction.IMAGE_TO_PDF)
    assert exc_info.value.status_code == 400
    assert "No file" in str(exc_info.value)


@pytest.mark.asyncio
async def test_gif_rejected_for_image_to_pdf():
    with pytest.raises(UploadValidationError) as exc_info:
        await validate_upload(upload("anim.gif", "image/gif", b"GIF89a"), "pdf", Direction.IMAGE_TO_PDF)
    assert exc_info.value.status_code == 400
    assert "JPEG or PNG" in str(exc_info.value)


@pytest.mark.asyncio
async def test_image_rejected_for_pdf_to_docx():
    with pytest.raises(UploadValidationError) as exc_info:
        await validate_upload(upload("p.png", "image/png", b"png"), "docx", Direction.PDF_TO_FORMAT)
    assert "PDF" in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("declare_size", [True, False])
async def test_oversize_pdf_rejected(declare_size):
    data = b"0" * (11 * MB)
    with pytest.raises(FileTooLargeError) as exc_info:
        await validate_upload(
            upload("big.pdf", "application/pdf", data, declare_size=declare_size),
            "docx",
            Direction.PDF_TO_FORMAT,
        )
    assert exc_info.value.status_code == 413


@pytest.mark.asyncio
async def test_exactly_at_limit_is_accepted():
    data = b"0" * (10 * MB)
    req = await validate_upload(upload("edge.pdf", "application/pdf", data), "docx", Direction.PDF_TO_FORMAT)
    assert req.source.size == 10 * MB
