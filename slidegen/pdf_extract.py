import io
import logging

from pdfminer.high_level import extract_text
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser
from pdfminer.pdftypes import resolve1
from pdfminer.utils import decode_text

from .errors import ExtractionError
from .models import PdfExtraction, PdfInfo
from .text_cleaning import clean_extracted_text

logger = logging.getLogger(__name__)

_INFO_FIELDS = {"title": "Title", "author": "Author", "subject": "Subject", "keywords": "Keywords"}


def _info_value(raw) -> str:
    value = resolve1(raw)
    if isinstance(value, bytes):
        return decode_text(value).strip()
    if isinstance(value, str):
        return value.strip()
    return ""


def _read_metadata(data: bytes):
    parser = PDFParser(io.BytesIO(data))
    document = PDFDocument(parser)
    info = {}
    for entry in document.info or []:
        for field, key in _INFO_FIELDS.items():
            if not info.get(field) and key in entry:
                info[field] = _info_value(entry[key])
    num_pages = sum(1 for _ in PDFPage.create_pages(document))
    return PdfInfo(**info), num_pages


def extract_pdf(data: bytes) -> PdfExtraction:
    """Pull raw text plus Title/Author/Subject/Keywords out of PDF bytes."""
    if not data:
        raise ExtractionError("Failed to parse PDF: empty document")
    try:
        info, num_pages = _read_metadata(data)
        text = extract_text(io.BytesIO(data))
    except Exception as e:
        # pdfminer raises a zoo of unrelated types on malformed input
        logger.error("PDF parse error: %s", e)
        raise ExtractionError(f"Failed to parse PDF: {e}") from e
    return PdfExtraction(text=text or "", num_pages=num_pages, info=info)


def extract_clean_pdf_text(data: bytes) -> PdfExtraction:
    extraction = extract_pdf(data)
    return extraction.model_copy(update={"text": clean_extracted_text(extraction.text)})
