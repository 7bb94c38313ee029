from abc import ABC, abstractmethod


class BaseRecognizer(ABC):
    """Contract for text recognizers operating on a rendered page image."""

    @abstractmethod
    def recognize(self, image_png: bytes, timeout_seconds: float) -> str:
        """Return the text recognized in a PNG image.

        Blocking; callers run it in a worker thread.

        Raises:
            OcrRecognitionError: if recognition fails or exceeds timeout_seconds.
        """
