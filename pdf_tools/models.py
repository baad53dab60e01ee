# pdf_tools/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(str, Enum):
    IMAGE_TO_PDF = "image-to-pdf"
    PDF_TO_FORMAT = "pdf-to-format"


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    REJECTED = "rejected"


DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PDF_MEDIA_TYPE = "application/pdf"

CONTENT_TYPES = {
    "docx": DOCX_MEDIA_TYPE,
    "pdf": PDF_MEDIA_TYPE,
}


@dataclass(frozen=True)
class SourceFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ConversionRequest:
    source: SourceFile
    direction: Direction
    target_format: str

    @property
    def output_format(self) -> str:
        if self.direction is Direction.IMAGE_TO_PDF:
            return "pdf"
        return self.target_format

    @property
    def output_media_type(self) -> str:
        return CONTENT_TYPES[self.output_format]

    def log_context(self) -> dict:
        return {
            "format": self.target_format,
            "direction": self.direction.value,
            "file_type": self.source.content_type,
            "file_size": self.source.size,
            "file_name": self.source.filename,
        }


@dataclass
class ConversionAttempt:
    endpoint: str
    index: int
    deadline: float
    outcome: Optional[AttemptOutcome] = None


@dataclass(frozen=True)
class ConversionResult:
    url: str
    media_type: str
    base_name: str
    extension: str

    @property
    def filename(self) -> str:
        return f"{self.base_name}.{self.extension}"
