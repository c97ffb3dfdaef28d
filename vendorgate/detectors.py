from __future__ import annotations
from typing import Optional
import mimetypes
import os

from .category_rules import CATEGORY_RULES
from .types import DocumentCategory, DocumentUpload

TEXT_TYPES = ("text/plain", "application/json")


def classify_filename(name: str) -> DocumentCategory:
    """Best-effort category guess from a filename; OTHER when nothing matches."""
    lowered = os.path.basename(name or "").lower()
    for rule in CATEGORY_RULES:
        if any(keyword in lowered for keyword in rule.get("keywords", [])):
            return DocumentCategory.parse(rule["name"])
    return DocumentCategory.OTHER


def resolve_category(upload: DocumentUpload) -> DocumentCategory:
    # explicit tag wins; filename sniffing is only a default
    if upload.category is not None:
        return DocumentCategory.parse(upload.category)
    return classify_filename(upload.filename)


def sniff_content_type(filename: str, declared: Optional[str] = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or declared or "application/octet-stream"


def extract_text(upload: DocumentUpload) -> str:
    """Return the text sent to the model.

    Plain text and JSON are decoded as-is. PDF and Word documents are not
    parsed: only a placeholder naming the file is returned.
    """
    content_type = sniff_content_type(upload.filename, upload.content_type)
    if content_type in TEXT_TYPES or content_type.startswith("text/"):
        return upload.content.decode("utf-8", errors="ignore")
    if content_type == "application/pdf":
        return f"[PDF Document: {upload.filename} - Please extract text using a PDF library]"
    if "word" in content_type:
        return f"[Word Document: {upload.filename} - Please extract text using a Word extraction library]"
    return f"[Document: {upload.filename}]"
