# pdf_tools/validation.py
import logging
from typing import Optional

from fastapi import UploadFile

from . import config
from .errors import FileTooLargeError, UploadValidationError
from .messages import message
from .models import ConversionRequest, Direction, SourceFile

logger = logging.getLogger(__name__)

ACCEPTED_TYPES = {
    Direction.IMAGE_TO_PDF: ("image/jpeg", "image/png"),
    Direction.PDF_TO_FORMAT: ("application/pdf",),
}

CHUNK_SIZE = 1024 * 1024  # 1MB chunks


def parse_direction(is_image_to_pdf: Optional[str]) -> Direction:
    if is_image_to_pdf == "true":
        return Direction.IMAGE_TO_PDF
    return Direction.PDF_TO_FORMAT


def check_content_type(content_type: Optional[str], direction: Direction) -> None:
    if content_type not in ACCEPTED_TYPES[direction]:
        key = "invalid_image_type" if direction is Direction.IMAGE_TO_PDF else "invalid_pdf_type"
        raise UploadValidationError(message(key))


def check_size(size: int, max_bytes: int) -> None:
    if size > max_bytes:
        raise FileTooLargeError(message("file_too_large", limit=max_bytes // (1024 * 1024)))


async def read_upload_limited(file: UploadFile, max_bytes: int) -> bytes:
    """
    Reads an UploadFile into memory and enforces max size while reading.
    Stops as soon as the limit is crossed.
    """
    chunks = []
    total = 0
    try:
        while True:
            chunk = await file.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            check_size(total, max_bytes)
            chunks.append(chunk)
    finally:
        await file.close()
    return b"".join(chunks)


async def validate_upload(
    file: Optional[UploadFile],
    target_format: Optional[str],
    direction: Direction,
    max_bytes: int = config.MAX_UPLOAD_BYTES,
) -> ConversionRequest:
    if file is None:
        raise UploadValidationError(message("no_file"))

    check_content_type(file.content_type, direction)

    # Reject on the declared size before reading anything
    if file.size is not None:
        check_size(file.size, max_bytes)
    data = await read_upload_limited(file, max_bytes)

    logger.debug("Upload accepted: %s (%s, %d bytes)", file.filename, file.content_type, len(data))
    return ConversionRequest(
        source=SourceFile(
            filename=file.filename or "file",
            content_type=file.content_type,
            data=data,
        ),
        direction=direction,
        target_format=target_format or "",
    )
