import io

import fitz
import pytest
from docx import Document

from app.core.errors import DocumentUnreadable, EmptyDocument, UnsupportedFileType
from app.services.parsing.text_extractor import extract_text, file_extension


def _pdf(*pages: str) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def test_file_extension_is_lowercased():
    assert file_extension("HopDong.DOCX") == ".docx"
    assert file_extension("scan.Pdf") == ".pdf"
    assert file_extension("noext") == ""


def test_docx_paragraphs_and_tables_keep_body_order():
    doc = Document()
    doc.add_paragraph("HỢP ĐỒNG DỊCH VỤ BẢO VỆ")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Ca sáng"
    table.cell(0, 1).text = "06h00 - 14h00"
    merged = table.cell(1, 0).merge(table.cell(1, 1))
    merged.text = "Ghi chú"
    doc.add_paragraph("ĐIỀU 1: NỘI DUNG")
    buf = io.BytesIO()
    doc.save(buf)

    text = extract_text(buf.getvalue(), "contract.docx")

    assert text.split("\n") == [
        "HỢP ĐỒNG DỊCH VỤ BẢO VỆ",
        "Ca sáng | 06h00 - 14h00",
        "Ghi chú",
        "ĐIỀU 1: NỘI DUNG",
    ]


def test_pdf_pages_are_concatenated():
    text = extract_text(_pdf("SECURITY SERVICE CONTRACT", "Article 2"), "contract.pdf")

    assert "SECURITY SERVICE CONTRACT" in text
    assert "Article 2" in text
    assert text.index("SECURITY") < text.index("Article 2")


def test_unsupported_extension_is_rejected_before_reading():
    with pytest.raises(UnsupportedFileType):
        extract_text(b"not even a document", "contract.txt")


def test_blank_pdf_is_empty_document():
    with pytest.raises(EmptyDocument):
        extract_text(_pdf(""), "blank.pdf")


def test_corrupt_docx_is_unreadable():
    with pytest.raises(DocumentUnreadable):
        extract_text(b"PK\x03\x04 broken", "broken.docx")


def test_encrypted_pdf_is_unreadable():
    doc = fitz.open()
    doc.new_page().insert_text((72, 72), "secret")
    data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
    doc.close()

    with pytest.raises(DocumentUnreadable):
        extract_text(data, "locked.pdf")
