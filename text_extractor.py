"""Plain-text extraction from uploaded PDF and DOCX documents."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import IO

import docx
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from pypdf import PdfReader

LOGGER = logging.getLogger(__name__)

DocumentSource = str | Path | IO[bytes]


class ExtractionError(RuntimeError):
    """A supported document could not be read."""


def extract_text_from_pdf(source: DocumentSource) -> str:
    """Text of every page in document order, one line break between pages."""
    reader = PdfReader(source)
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def extract_text_from_docx(source: DocumentSource) -> str:
    """Body text of a DOCX in document order: paragraphs and table cells as they appear."""
    document = docx.Document(source)
    parts: list[str] = []
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:p"):
            parts.append(Paragraph(child, document).text)
        elif child.tag == qn("w:tbl"):
            parts.extend(_table_cell_texts(Table(child, document)))
    text = "\n".join(parts)
    return text if text.strip() else ""


def _table_cell_texts(table: Table) -> list[str]:
    # row.cells repeats a merged cell once per grid column it spans
    seen = set()
    texts: list[str] = []
    for row in table.rows:
        for cell in row.cells:
            if cell._tc in seen:
                continue
            seen.add(cell._tc)
            texts.append(cell.text)
    return texts


EXTRACTORS: dict[str, Callable[[DocumentSource], str]] = {
    "pdf": extract_text_from_pdf,
    "docx": extract_text_from_docx,
}


def document_kind(filename: str) -> str:
    """Lower-case extension of filename without the dot ("" if none)."""
    return Path(filename).suffix.lower().lstrip(".")


def extract_text(source: DocumentSource, kind: str) -> str:
    """Route to the extractor for kind; unsupported kinds yield "".

    Raises ExtractionError when a supported document is corrupt or unreadable.
    """
    normalized_kind = kind.lower().lstrip(".")
    extractor = EXTRACTORS.get(normalized_kind)
    if extractor is None:
        LOGGER.info("No extractor for document kind=%r", kind)
        return ""

    try:
        text = extractor(source)
    except Exception as exc:
        raise ExtractionError(f"Could not read {normalized_kind.upper()} document: {exc}") from exc

    LOGGER.info("Extracted %s characters from %s document", len(text), normalized_kind)
    return text
