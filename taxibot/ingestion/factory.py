from taxibot.config.settings import Settings
from taxibot.ingestion.base import BaseTextExtractor
from taxibot.ingestion.exceptions import UnsupportedMimeTypeError
from taxibot.ingestion.pdfplumber_adapter import PdfPlumberAdapter
from taxibot.ingestion.plaintext_adapter import PlainTextAdapter
from taxibot.ingestion.pymupdf_adapter import PyMuPdfAdapter
from taxibot.ingestion.tesseract_adapter import TesseractAdapter


class TextExtractorFactory:
    """Creates the correct text extractor for a MIME type based on settings."""

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    TEXT_MIME_TYPES = frozenset({"application/xml", "text/xml", "application/json"})

    @classmethod
    def create(cls, settings: Settings, mime_type: str) -> BaseTextExtractor:
        mime = mime_type.split(";", 1)[0].strip().lower()
        if mime == "application/pdf":
            return cls._create_pdf_adapter(settings)
        if mime.startswith("image/"):
            return TesseractAdapter(language=settings.ocr_language)
        if mime.startswith("text/") or mime in cls.TEXT_MIME_TYPES:
            return PlainTextAdapter()
        raise UnsupportedMimeTypeError(f"Unsupported MIME type '{mime_type}'")

    @classmethod
    def _create_pdf_adapter(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return adapter_cls()
