"""Adapter: document bytes -> one linear text stream.

.docx is walked in body order (paragraphs and table rows), .pdf page by page.
Line breaks mark paragraph / table-row boundaries; downstream extractors rely on them.
"""

from __future__ import annotations

import io
import logging
import os
from typing import Iterator, List

import fitz  # PyMuPDF
from docx import Document
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table
from docx.text.paragraph import Paragraph

from app.core.errors import DocumentUnreadable, EmptyDocument, UnsupportedFileType

logger = logging.getLogger("contracts.parsing")

SUPPORTED_EXTENSIONS = (".docx", ".pdf")
CELL_SEPARATOR = " | "


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def extract_text(data: bytes, filename: str) -> str:
    ext = file_extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileType(f"Unsupported file type '{ext or filename}'. Only .docx and .pdf are accepted")

    if ext == ".docx":
        text = _extract_docx(data)
    else:
        text = _extract_pdf(data)

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if not text.strip():
        raise EmptyDocument(f"No text could be extracted from {filename}")
    return text


# -------------------------------------------------
# DOCX
# -------------------------------------------------
def _iter_block_items(doc) -> Iterator[object]:
    body = doc.element.body
    for child in body.iterchildren():
        if isinstance(child, CT_P):
            yield Paragraph(child, doc)
        elif isinstance(child, CT_Tbl):
            yield Table(child, doc)


def _dedup_consecutive(values: List[str]) -> List[str]:
    out: List[str] = []
    for v in values:
        if not out or v != out[-1]:
            out.append(v)
    return out


def _table_lines(table: Table) -> List[str]:
    lines = []
    for row in table.rows:
        # merged cells repeat the same text across the grid
        cells = _dedup_consecutive([" ".join(c.text.split()) for c in row.cells])
        if any(cells):
            lines.append(CELL_SEPARATOR.join(cells))
    return lines


def _extract_docx(data: bytes) -> str:
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        raise DocumentUnreadable(f"Word document could not be opened: {e}") from e

    lines: List[str] = []
    for block in _iter_block_items(doc):
        if isinstance(block, Paragraph):
            lines.append(block.text)
        else:
            lines.extend(_table_lines(block))
    return "\n".join(lines)


# -------------------------------------------------
# PDF
# -------------------------------------------------
def _extract_pdf(data: bytes) -> str:
    try:
        pdf = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise DocumentUnreadable(f"PDF could not be opened: {e}") from e

    with pdf:
        if pdf.needs_pass:
            raise DocumentUnreadable("PDF is encrypted")

        pages: List[str] = []
        for index in range(pdf.page_count):
            try:
                pages.append(pdf.load_page(index).get_text("text"))
            except Exception as e:
                logger.warning("skipping unreadable PDF page %d: %s", index + 1, e)
        return "\n".join(pages)
