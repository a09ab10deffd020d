from __future__ import annotations

from hireflow.config import MAX_UPLOAD_BYTES
from hireflow.core.document_extractor import (
    DOCX_MIME,
    PDF_MIME,
    detect_format,
    extract_document,
    is_supported_format,
)
from hireflow.types import UploadedDocument


def test_pdf_text_is_extracted(make_pdf) -> None:
    data = make_pdf("Ada Lovelace\nPython engineer", "Second page")
    result = extract_document(UploadedDocument(data=data, file_name="ada.pdf", declared_mime_type=PDF_MIME))

    assert result.ok is True
    assert "Ada Lovelace" in result.text
    assert "Second page" in result.text
    assert result.file_name == "ada.pdf"
    assert result.file_size == len(data)


def test_docx_paragraphs_and_tables_are_extracted(make_docx) -> None:
    data = make_docx(
        "Grace Hopper",
        "Compiler pioneer",
        table=[["Skill", "COBOL"]],
        after_table=("References on request",),
    )
    result = extract_document(UploadedDocument(data=data, file_name="grace.docx", declared_mime_type=DOCX_MIME))

    assert result.ok is True
    assert result.text.splitlines() == [
        "Grace Hopper",
        "Compiler pioneer",
        "Skill COBOL",
        "References on request",
    ]


def test_generic_mime_falls_back_to_extension(make_docx) -> None:
    data = make_docx("Linus")
    result = extract_document(
        UploadedDocument(data=data, file_name="cv.DOCX", declared_mime_type="application/octet-stream")
    )

    assert result.ok is True
    assert result.text == "Linus"


def test_legacy_doc_is_rejected_with_conversion_hint() -> None:
    result = extract_document(UploadedDocument(data=b"\xd0\xcf\x11\xe0legacy", file_name="cv.doc"))

    assert result.ok is False
    assert result.kind == "legacy_format"
    assert ".docx" in result.error


def test_unsupported_format_is_rejected() -> None:
    result = extract_document(
        UploadedDocument(data=b"plain text resume", file_name="cv.txt", declared_mime_type="text/plain")
    )

    assert result.ok is False
    assert result.kind == "unsupported_format"
    assert result.file_name == "cv.txt"
    assert result.file_size == len(b"plain text resume")


def test_specific_mime_overrides_extension(make_pdf) -> None:
    result = extract_document(
        UploadedDocument(data=make_pdf("text"), file_name="cv.pdf", declared_mime_type="image/png")
    )

    assert result.ok is False
    assert result.kind == "unsupported_format"


def test_size_limit_is_inclusive() -> None:
    at_limit = extract_document(UploadedDocument(data=b"x" * 100, file_name="cv.pdf"), max_bytes=100)
    over_limit = extract_document(UploadedDocument(data=b"x" * 101, file_name="cv.pdf"), max_bytes=100)

    assert at_limit.ok is False
    assert at_limit.kind != "too_large"
    assert over_limit.ok is False
    assert over_limit.kind == "too_large"


def test_default_limit_is_ten_mebibytes() -> None:
    exactly = extract_document(UploadedDocument(data=b"\0" * MAX_UPLOAD_BYTES, file_name="big.pdf"))
    one_more = extract_document(UploadedDocument(data=b"\0" * (MAX_UPLOAD_BYTES + 1), file_name="big.pdf"))

    assert exactly.kind != "too_large"
    assert one_more.kind == "too_large"
    assert "10 MB" in one_more.error


def test_empty_upload_is_rejected() -> None:
    result = extract_document(UploadedDocument(data=b"", file_name="cv.pdf", declared_mime_type=PDF_MIME))

    assert result.ok is False
    assert result.kind == "empty"


def test_corrupt_docx_reports_parse_failure() -> None:
    result = extract_document(UploadedDocument(data=b"not a zip archive", file_name="cv.docx"))

    assert result.ok is False
    assert result.kind == "corrupt"
    assert result.error.startswith("Word document parsing failed")


def test_garbage_pdf_never_raises() -> None:
    result = extract_document(UploadedDocument(data=b"definitely not a pdf", file_name="cv.pdf"))

    assert result.ok is False
    assert result.kind in {"corrupt", "no_text"}


def test_pdf_without_text_is_rejected(make_pdf) -> None:
    result = extract_document(UploadedDocument(data=make_pdf(""), file_name="scan.pdf"))

    assert result.ok is False
    assert result.kind == "no_text"


def test_detect_format_helpers() -> None:
    assert detect_format("application/pdf; charset=binary", "x.bin") == "pdf"
    assert detect_format(None, "resume.pdf") == "pdf"
    assert detect_format("", "resume.doc") == "doc"
    assert detect_format(None, "resume") is None
    assert is_supported_format(None, "resume.docx") is True
    assert is_supported_format(None, "resume.doc") is False
