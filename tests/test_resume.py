import io

import docx
import fitz
import pytest

from parsers.resume import UnsupportedResumeType, extract_resume_text, normalize_resume_text


def test_normalize_collapses_whitespace_and_newlines():
    assert normalize_resume_text("  Jane Doe\n\n\tPython   AWS\r\nDocker  ") == "Jane Doe Python AWS Docker"
    assert normalize_resume_text("") == ""


def test_plain_text():
    text = extract_resume_text("Jane Doe\n\n5 years Python".encode(), "text/plain", "cv.txt")
    assert text == "Jane Doe 5 years Python"


def test_latin1_text_is_decoded():
    assert extract_resume_text("Zoë Müller".encode("latin-1"), "text/plain") == "Zoë Müller"


def test_pdf():
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Jane Doe Python Engineer")
    data = doc.tobytes()
    doc.close()
    assert "Jane Doe Python Engineer" in extract_resume_text(data, "application/pdf", "cv.pdf")


def test_docx():
    document = docx.Document()
    document.add_paragraph("Jane Doe")
    document.add_paragraph("Senior Python Engineer")
    buf = io.BytesIO()
    document.save(buf)
    text = extract_resume_text(
        buf.getvalue(),
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "cv.docx",
    )
    assert text == "Jane Doe Senior Python Engineer"


def test_unsupported_type():
    with pytest.raises(UnsupportedResumeType):
        extract_resume_text(b"\x89PNG", "image/png", "photo.png")
