import pymupdf

from taxibot.ingestion.base import BaseTextExtractor
from taxibot.ingestion.exceptions import TextExtractionError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts text from PDF using PyMuPDF."""

    def extract(self, raw_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=raw_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc
