"""Tests for filename categorization and text extraction."""

import pytest

from vendorgate.detectors import classify_filename, extract_text, resolve_category, sniff_content_type
from vendorgate.types import DocumentCategory, DocumentUpload


@pytest.mark.parametrize("name,expected", [
    ("SOC2_Type_II_2024.pdf", DocumentCategory.CYBERSECURITY),
    ("criminal-background-check.pdf", DocumentCategory.CRIMINAL),
    ("FY2024 Financial Statement.docx", DocumentCategory.FINANCIAL),
    ("certificate_of_insurance.pdf", DocumentCategory.RISK),
    ("holiday_photo.png", DocumentCategory.OTHER),
])
def test_classify_filename(name, expected):
    assert classify_filename(name) == expected


def test_explicit_category_wins_over_filename():
    """A caller-supplied tag overrides the filename heuristic."""
    upload = DocumentUpload("soc2_report.pdf", b"", category=DocumentCategory.RISK)
    assert resolve_category(upload) == DocumentCategory.RISK


def test_unknown_category_tag_is_other():
    assert DocumentCategory.parse("marketing") == DocumentCategory.OTHER


def test_sniff_content_type_from_filename():
    assert sniff_content_type("report.pdf") == "application/pdf"
    assert sniff_content_type("report.pdf", "application/octet-stream") == "application/pdf"
    assert sniff_content_type("blob", "text/plain") == "text/plain"


def test_extract_text_decodes_plain_text():
    upload = DocumentUpload("policy.txt", "Access reviews quarterly ✓".encode("utf-8"))
    assert extract_text(upload) == "Access reviews quarterly ✓"


def test_extract_text_ignores_invalid_utf8():
    upload = DocumentUpload("notes.txt", b"ok\xff\xfe", content_type="text/plain")
    assert extract_text(upload) == "ok"


def test_extract_text_placeholders():
    pdf = DocumentUpload("soc2.pdf", b"%PDF-1.7")
    word = DocumentUpload("audit.doc", b"PK\x03\x04")
    other = DocumentUpload("scan.png", b"\x89PNG")
    assert extract_text(pdf) == "[PDF Document: soc2.pdf - Please extract text using a PDF library]"
    assert extract_text(word).startswith("[Word Document: audit.doc ")
    assert extract_text(other) == "[Document: scan.png]"
