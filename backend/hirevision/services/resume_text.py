import io
import logging

import pypdf

logger = logging.getLogger(__name__)

PDF_TYPES = ("application/pdf", "application/x-pdf")


def extract_resume_text(content: bytes, file_name: str, content_type: str | None) -> str:
    """Extract readable text from an uploaded resume (PDF or plain text)."""
    is_pdf = content_type in PDF_TYPES or file_name.lower().endswith(".pdf")
    if is_pdf:
        try:
            reader = pypdf.PdfReader(io.BytesIO(content))
            pages = [page.extract_text() or "" for page in reader.pages]
            return "\n".join(pages).strip()
        except Exception as exc:
            # pypdf surfaces malformed files as many exception types
            logger.warning("Could not extract text from %s: %s", file_name, exc)
            return ""

    text = content.decode("utf-8", errors="ignore")
    # Reject binary formats (.docx, images) that decode to mostly garbage
    printable = sum(1 for c in text if c.isprintable() or c.isspace())
    if text and printable / len(text) > 0.85:
        return text.strip()
    return ""
