from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.pdf.exceptions import PdfExtractionError

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class PdfText:
    """Text layer of a PDF, one entry per page; image-only pages are blank."""

    pages: tuple[str, ...]

    @property
    def text(self) -> str:
        return PAGE_SEPARATOR.join(page for page in self.pages if page)

    @property
    def pages_with_text(self) -> int:
        return sum(1 for page in self.pages if page)

    @property
    def has_text_layer(self) -> bool:
        return self.pages_with_text > 0


class BasePdfExtractor(ABC):
    """Contract for PDF text extraction adapters.

    Subclasses only read raw page text; error wrapping and page cleanup
    happen here.
    """

    engine: str = "base"

    def read(self, pdf_bytes: bytes) -> PdfText:
        """Read the text layer of every page.

        A scanned PDF yields pages that are all blank rather than an error.

        Raises:
            PdfExtractionError: if the bytes cannot be opened as a PDF.
        """
        try:
            pages = self._read_pages(pdf_bytes)
        except PdfExtractionError:
            raise
        except Exception as exc:
            raise PdfExtractionError(f"{self.engine} extraction failed: {exc}") from exc
        return PdfText(pages=tuple(page.strip() for page in pages))

    def extract(self, pdf_bytes: bytes) -> str:
        """Text of all pages joined with PAGE_SEPARATOR; empty for scanned PDFs."""
        return self.read(pdf_bytes).text

    @abstractmethod
    def _read_pages(self, pdf_bytes: bytes) -> list[str]:
        """Return the raw text of each page, in page order."""
