import mimetypes
from pathlib import Path

from docingest.processor.exceptions import FileReadError
from docingest.processor.models import RawDocument

DEFAULT_MIME_TYPE = "application/octet-stream"


class FileLoader:
    """Reads a local file into a RawDocument."""

    def load(self, path: Path, mime_type: str | None = None) -> RawDocument:
        """Read file bytes, guessing the mime type from the name when not given.

        Raises:
            FileReadError: if the file does not exist or cannot be read.
        """
        if not path.is_file():
            raise FileReadError(f"File not found: {path}")
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Could not read {path}: {exc}") from exc

        guessed, _ = mimetypes.guess_type(path.name)
        return RawDocument(
            content=content,
            mime_type=mime_type or guessed or DEFAULT_MIME_TYPE,
            filename=path.name,
        )
