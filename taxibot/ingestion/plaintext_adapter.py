from taxibot.ingestion.base import BaseTextExtractor
from taxibot.ingestion.exceptions import TextExtractionError


class PlainTextAdapter(BaseTextExtractor):
    """Decodes text and XML payloads (NFe XML files arrive this way)."""

    def extract(self, raw_bytes: bytes) -> str:
        if not raw_bytes:
            raise TextExtractionError("Empty document payload")
        try:
            text = raw_bytes.decode("utf-8")
        except UnicodeDecodeError:
            # Older SEFAZ exports are latin-1 encoded
            text = raw_bytes.decode("latin-1")
        return text.lstrip("\ufeff").strip()
