# pdf_tools/api.py
import asyncio
import json
import logging
import time
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import UploadFile as StarletteUploadFile

from . import config
from .config import ConversionPolicy
from .errors import (
    ConversionError,
    PdfOperationError,
    PdfToolsError,
    ServiceConfigurationError,
    UploadValidationError,
)
from .messages import message
from .models import PDF_MEDIA_TYPE
from .orchestrator import ConversionOrchestrator
from .pdf_ops import merge_pdfs, reprocess_pdf
from .provider import ConversionGateway, ConvertApiGateway
from .streaming import CORS_HEADERS, stream_result
from .validation import parse_direction, read_upload_limited, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# ----------------------------
# Dependencies
# ----------------------------
def get_policy(request: Request) -> ConversionPolicy:
    return request.app.state.policy


def get_gateway(request: Request) -> ConversionGateway:
    secret = config.convertapi_secret()
    if not secret:
        raise ServiceConfigurationError(f"{config.CONVERTAPI_SECRET_ENV} environment variable is not set")
    return ConvertApiGateway(request.app.state.http_client, secret)


# ----------------------------
# Error responses
# ----------------------------
def internal_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        headers=CORS_HEADERS,
        content={
            "error": message("unexpected"),
            "details": {
                "message": str(exc) or "Unknown error",
                "type": type(exc).__name__,
                "code": "INTERNAL_SERVER_ERROR",
            },
        },
    )


async def validation_error_handler(request: Request, exc: UploadValidationError) -> JSONResponse:
    logger.warning("Rejected upload on %s (%s): %s", request.url.path, exc.status_code, exc)
    return JSONResponse(status_code=exc.status_code, headers=CORS_HEADERS, content={"error": str(exc)})


async def conversion_error_handler(request: Request, exc: ConversionError) -> JSONResponse:
    logger.error("Conversion error: %s (%s, status=%s)", exc.message, type(exc).__name__, exc.status)
    return JSONResponse(
        status_code=exc.status_code,
        headers=CORS_HEADERS,
        content={
            "error": f"{message('conversion_failed')}: {exc.message}",
            "details": {
                "message": exc.message,
                "type": type(exc).__name__,
                "status": exc.status,
            },
        },
    )


async def pdf_operation_error_handler(request: Request, exc: PdfOperationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, headers=CORS_HEADERS, content={"error": exc.message})


async def server_error_handler(request: Request, exc: PdfToolsError) -> JSONResponse:
    logger.error("Server error on %s: %s", request.url.path, exc)
    return internal_error_response(exc)


EXCEPTION_HANDLERS = {
    UploadValidationError: validation_error_handler,
    ConversionError: conversion_error_handler,
    PdfOperationError: pdf_operation_error_handler,
    PdfToolsError: server_error_handler,
}


# ----------------------------
# Preflight
# ----------------------------
@router.options("/convert")
@router.options("/pdf")
def preflight():
    return Response(headers=CORS_HEADERS)


# ----------------------------
# Conversion API
# ----------------------------
@router.post("/convert")
async def convert(
    file: Optional[UploadFile] = File(None),
    target_format: Optional[str] = Form(None, alias="format"),
    is_image_to_pdf: Optional[str] = Form(None, alias="isImageToPdf"),
    gateway: ConversionGateway = Depends(get_gateway),
    policy: ConversionPolicy = Depends(get_policy),
):
    try:
        conversion = await validate_upload(file, target_format, parse_direction(is_image_to_pdf))
        result = await ConversionOrchestrator(gateway, policy).run(conversion)
        return await stream_result(gateway, result, policy.download_timeout)
    except PdfToolsError:
        raise
    except Exception as e:
        logger.exception("Unexpected failure converting %s", getattr(file, "filename", None))
        return internal_error_response(e)


# ----------------------------
# PDF APIs
# ----------------------------
@router.post("/merge")
async def merge(request: Request):
    form = await request.form()

    uploads: List[StarletteUploadFile] = []
    i = 0
    while isinstance(form.get(f"file{i}"), StarletteUploadFile):
        uploads.append(form.get(f"file{i}"))
        i += 1

    if len(uploads) < 2:
        raise PdfOperationError(message("merge_need_two"), 400)

    files: List[Tuple[str, bytes]] = []
    for f in uploads:
        data = await read_upload_limited(f, config.MAX_UPLOAD_BYTES)
        files.append((f.filename or "file.pdf", data))

    try:
        merged = await asyncio.to_thread(merge_pdfs, files)
    except ValueError as e:
        raise PdfOperationError(message("merge_bad_file", filename=str(e)), 400)
    except Exception as e:
        logger.exception("Error merging PDFs")
        raise PdfOperationError(message("merge_failed"), 500) from e

    return Response(
        content=merged,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=merged-{int(time.time() * 1000)}.pdf"},
    )


@router.post("/pdf")
async def process_pdf(
    file: Optional[UploadFile] = File(None),
    options: Optional[str] = Form(None),
):
    if file is None:
        raise PdfOperationError(message("process_no_file"), 400)
    if file.content_type != PDF_MEDIA_TYPE:
        raise PdfOperationError(message("process_bad_type"), 400)

    data = await read_upload_limited(file, config.MAX_UPLOAD_BYTES)

    try:
        opts = json.loads(options or "null")
    except ValueError:
        raise PdfOperationError(message("process_bad_options"), 400)
    logger.info("Processing %s (%d bytes, options=%s)", file.filename, len(data), opts)

    try:
        out = await asyncio.wait_for(
            asyncio.to_thread(reprocess_pdf, data),
            timeout=config.PROCESS_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("PDF processing of %s timed out", file.filename)
        raise PdfOperationError(message("process_timeout"), 500)
    except Exception as e:
        logger.exception("PDF processing error for %s", file.filename)
        raise PdfOperationError(message("process_failed"), 500) from e

    return Response(
        content=out,
        media_type=PDF_MEDIA_TYPE,
        headers={
            **CORS_HEADERS,
            "Content-Disposition": 'attachment; filename="processed.pdf"',
            "X-Original-Bytes": str(len(data)),
            "X-Output-Bytes": str(len(out)),
        },
    )
