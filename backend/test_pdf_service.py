"""
Tests for PDF text extraction, including scanned, invalid and encrypted files.
"""

import io

from pypdf import PdfWriter

from athena.services.pdf_service import PDFService


def _blank_pdf(password=None) -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    if password:
        writer.encrypt(password)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_blank_pdf_is_image_based():
    data = _blank_pdf()

    result = PDFService().extract_text(data, "scan.pdf")

    assert result.success
    assert result.page_count == 1
    assert result.is_image_based
    assert result.text == ""
    assert result.file_name == "scan.pdf"
    assert result.file_size == len(data)
    assert result.message.startswith("PDF appears to be scanned")


def test_invalid_pdf_fails_gracefully():
    result = PDFService().extract_text(b"this is not a pdf", "broken.pdf")

    assert not result.success
    assert result.error
    assert result.file_name == "broken.pdf"


def test_encrypted_pdf_reports_password_protection():
    result = PDFService().extract_text(_blank_pdf(password="secret"), "locked.pdf")

    assert not result.success
    assert result.error == "PDF is password protected. Please provide an unprotected PDF."
