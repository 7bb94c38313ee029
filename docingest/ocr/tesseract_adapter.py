import io

import pytesseract
from PIL import Image

from docingest.ocr.base import BaseRecognizer
from docingest.ocr.exceptions import OcrRecognitionError


class TesseractRecognizer(BaseRecognizer):
    """Recognizes page images with the tesseract binary via pytesseract."""

    def __init__(self, language: str = "eng") -> None:
        self._language = language

    def recognize(self, image_png: bytes, timeout_seconds: float) -> str:
        try:
            with Image.open(io.BytesIO(image_png)) as image:
                # pytesseract kills the tesseract process once the timeout elapses.
                text = pytesseract.image_to_string(
                    image,
                    lang=self._language,
                    timeout=timeout_seconds,
                )
        except (pytesseract.TesseractError, OSError) as exc:
            raise OcrRecognitionError(f"tesseract failed: {exc}") from exc
        except RuntimeError as exc:
            # TesseractError subclasses RuntimeError; only the timeout is left here.
            raise OcrRecognitionError(f"tesseract timed out after {timeout_seconds}s") from exc
        return str(text)
