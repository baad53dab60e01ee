# pdf_tools/pdf_ops.py
import io
import logging
from typing import List, Tuple

from PyPDF2 import PdfReader, PdfWriter

logger = logging.getLogger(__name__)


def merge_pdfs(files: List[Tuple[str, bytes]]) -> bytes:
    """
    Appends every page of every PDF, in upload order, into one document.
    Raises ValueError naming the first file that cannot be read.
    """
    writer = PdfWriter()
    for name, data in files:
        try:
            reader = PdfReader(io.BytesIO(data))
            for page in reader.pages:
                writer.add_page(page)
        except Exception as e:
            logger.error("Error processing file %s: %r", name, e)
            raise ValueError(name) from e

    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def reprocess_pdf(data: bytes) -> bytes:
    """Load and re-save a PDF with compressed content streams."""
    reader = PdfReader(io.BytesIO(data))
    writer = PdfWriter()
    for page in reader.pages:
        writer.add_page(page)
    for page in writer.pages:
        page.compress_content_streams()

    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()
