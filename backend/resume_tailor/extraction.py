"""
PDF ➜ raw resume text
– strips `(cid:N)` glyph artifacts left by some embedded fonts
"""
import io
import re
import logging

import pdfplumber

# Optional libmagic for MIME detection; fallback to simple PDF signature check
try:
    import magic  # type: ignore
except Exception:  # libmagic may be missing on some systems
    magic = None  # type: ignore

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)

_CID_RX = re.compile(r"\(cid:\d+\)")


def is_pdf_bytes(data: bytes) -> bool:
    """Check that an upload is a PDF.

    Prefer libmagic when available; otherwise fall back to the standard
    ``%PDF-`` header signature.
    """
    if not data:
        return False
    if magic is not None:
        try:
            if magic.from_buffer(data[:4096], mime=True) == "application/pdf":
                return True
        except Exception as e:
            logger.debug(f"libmagic check failed, using header check: {e}")
    return data[:5] == b"%PDF-"


def extract_text_from_pdf(data: bytes) -> str:
    """Extract plain text from PDF bytes, page by page."""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        raise ExternalServiceError(f"Could not read resume PDF: {e!r}") from e
    text = _CID_RX.sub("", "\n".join(pages))
    return text.strip()
