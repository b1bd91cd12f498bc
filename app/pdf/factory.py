from typing import ClassVar

from app.config.settings import Settings
from app.logging.logger import Log
from app.pdf.base import BasePdfExtractor
from app.pdf.pdfplumber_adapter import PdfPlumberAdapter
from app.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Creates the PDF text extractor named by `pdf_engine`."""

    ADAPTERS: ClassVar[dict[str, type[BasePdfExtractor]]] = {
        adapter.engine: adapter for adapter in (PdfPlumberAdapter, PyMuPdfAdapter)
    }
    # PyMuPDF's historical import name.
    ALIASES: ClassVar[dict[str, str]] = {"fitz": "pymupdf"}

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        return cls.for_engine(settings.pdf_engine)

    @classmethod
    def for_engine(cls, engine: str) -> BasePdfExtractor:
        name = engine.strip().lower()
        name = cls.ALIASES.get(name, name)
        adapter_cls = cls.ADAPTERS.get(name)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {sorted(cls.ADAPTERS)}"
            )
        Log.info(f"Using {adapter_cls.engine} for PDF text extraction")
        return adapter_cls()
