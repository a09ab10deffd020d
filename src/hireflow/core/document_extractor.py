from __future__ import annotations

import io
import logging
from pathlib import PurePath

import docx
import fitz  # PyMuPDF
from docx.table import Table

from hireflow.config import MAX_UPLOAD_BYTES
from hireflow.types import (
    DocumentExtraction,
    ExtractedDocument,
    ExtractionErrorKind,
    ExtractionFailure,
    UploadedDocument,
)

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
LEGACY_DOC_MIME = "application/msword"
GENERIC_MIMES = {"", "application/octet-stream", "binary/octet-stream", "application/unknown"}

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".pdf", ".docx")

_MIME_FORMATS = {
    PDF_MIME: "pdf",
    "application/x-pdf": "pdf",
    DOCX_MIME: "docx",
    LEGACY_DOC_MIME: "doc",
}
_EXTENSION_FORMATS = {".pdf": "pdf", ".docx": "docx", ".doc": "doc"}


def extract_document(document: UploadedDocument, max_bytes: int = MAX_UPLOAD_BYTES) -> DocumentExtraction:
    """Convert an uploaded PDF or DOCX résumé into plain text.

    Every failure mode comes back as an ``ExtractionFailure`` carrying a
    user-displayable message along with the original file name and size.
    """
    size = document.size
    if size > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        return _failure(document, "too_large", f"File exceeds the {limit_mb:g} MB upload limit")

    doc_format = detect_format(document.declared_mime_type, document.file_name)
    if doc_format == "doc":
        return _failure(
            document,
            "legacy_format",
            "Legacy Word format (.doc) is not supported; please convert the file to .docx",
        )
    if doc_format is None:
        return _failure(
            document,
            "unsupported_format",
            "Unsupported format: only PDF and Word (.docx) files are accepted",
        )

    if size == 0:
        return _failure(document, "empty", "Uploaded file is empty")

    try:
        if doc_format == "pdf":
            text = pdf_to_text(document.data)
        else:
            text = docx_to_text(document.data)
    except Exception as exc:
        logger.warning("Document decode failed file=%s format=%s error=%s", document.file_name, doc_format, exc)
        label = "PDF" if doc_format == "pdf" else "Word document"
        return _failure(document, "corrupt", f"{label} parsing failed: {str(exc) or type(exc).__name__}")

    text = text.strip()
    if not text:
        return _failure(document, "no_text", "No extractable text was found in the document")

    logger.info("Extracted %d characters from %s (%s)", len(text), document.file_name, doc_format)
    return ExtractedDocument(text=text, file_name=document.file_name, file_size=size)


def detect_format(declared_mime_type: str | None, file_name: str) -> str | None:
    mime = normalize_mime(declared_mime_type)
    if mime not in GENERIC_MIMES:
        return _MIME_FORMATS.get(mime)
    return _EXTENSION_FORMATS.get(PurePath(file_name or "").suffix.lower())


def normalize_mime(declared_mime_type: str | None) -> str:
    if not declared_mime_type:
        return ""
    return declared_mime_type.split(";", 1)[0].strip().lower()


def is_supported_format(declared_mime_type: str | None, file_name: str) -> bool:
    return detect_format(declared_mime_type, file_name) in {"pdf", "docx"}


def pdf_to_text(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as pdf:
        pages = [page.get_text("text").strip() for page in pdf]
    return "\n".join(pages)


def docx_to_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    lines: list[str] = []
    for block in document.iter_inner_content():
        if isinstance(block, Table):
            for row in block.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(" ".join(cells))
        elif block.text.strip():
            lines.append(block.text)
    return "\n".join(lines)


def _failure(document: UploadedDocument, kind: ExtractionErrorKind, message: str) -> ExtractionFailure:
    logger.info("Rejected upload file=%s size=%d kind=%s", document.file_name, document.size, kind)
    return ExtractionFailure(
        kind=kind,
        error=message,
        file_name=document.file_name,
        file_size=document.size,
    )
