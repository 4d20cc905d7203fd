import io
import logging
import re

import docx
import fitz  # PyMuPDF
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
TEXT_TYPES = {"text/plain"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}


class UnsupportedResumeType(ValueError):
    pass


def normalize_resume_text(text: str) -> str:
    """Collapse all whitespace runs (newlines included) to one space and trim."""
    return re.sub(r"\s+", " ", text or "").strip()


def read_pdf(data: bytes) -> str:
    """Extract text from PDF bytes using PyMuPDF primarily, fallback to PyPDF2."""
    text = ""
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            text = "\n".join(page.get_text("text") or "" for page in doc)
        if text.strip():
            logger.info("Extracted %d characters via PyMuPDF", len(text))
            return text
    except Exception as e:
        logger.warning("PyMuPDF extraction failed: %s", e)

    try:
        reader = PdfReader(io.BytesIO(data))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        if text.strip():
            logger.info("Extracted %d characters via PyPDF2 fallback", len(text))
            return text
    except Exception as e:
        logger.error("PyPDF2 extraction failed: %s", e)

    logger.warning("No text extracted from PDF")
    return text


def read_docx(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    text = "\n".join(para.text for para in document.paragraphs)
    for table in document.tables:
        for row in table.rows:
            text += "\n" + " ".join(cell.text for cell in row.cells)
    return text


def read_txt(data: bytes) -> str:
    for encoding in ("utf-8", "latin-1"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValueError("Unable to decode file with supported encodings")


def extract_resume_text(data: bytes, content_type: str, filename: str = "") -> str:
    """Pick a reader by content type (or extension) and return normalized text."""
    content_type = (content_type or "").split(";")[0].strip().lower()
    name = (filename or "").lower()

    if content_type in PDF_TYPES or name.endswith(".pdf"):
        raw = read_pdf(data)
    elif content_type in DOCX_TYPES or name.endswith(".docx"):
        raw = read_docx(data)
    elif content_type in TEXT_TYPES or name.endswith(".txt"):
        raw = read_txt(data)
    else:
        raise UnsupportedResumeType(content_type or name)
    return normalize_resume_text(raw)
