import io

import pdfplumber

from app.pdf.base import BasePdfExtractor


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads the PDF text layer page by page using pdfplumber."""

    engine = "pdfplumber"

    def _read_pages(self, pdf_bytes: bytes) -> list[str]:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            return [page.extract_text() or "" for page in pdf.pages]
