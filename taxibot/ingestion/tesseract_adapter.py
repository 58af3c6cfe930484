"""OCR adapter for scanned invoices (photos, scans) based on Tesseract."""

import io

import pytesseract
from PIL import Image

from taxibot.ingestion.base import BaseTextExtractor
from taxibot.ingestion.exceptions import TextExtractionError


class TesseractAdapter(BaseTextExtractor):
    """Extracts text from raster images using Tesseract OCR."""

    def __init__(self, language: str = "por", psm: int = 6) -> None:
        self._language = language
        self._psm = psm

    def extract(self, raw_bytes: bytes) -> str:
        try:
            with Image.open(io.BytesIO(raw_bytes)) as image:
                text = pytesseract.image_to_string(
                    image.convert("RGB"),
                    lang=self._language,
                    config=f"--psm {self._psm}",
                )
            return text.strip()
        except Exception as exc:
            raise TextExtractionError(f"tesseract extraction failed: {exc}") from exc
