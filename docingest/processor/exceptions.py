from docingest.processor.messages import message_for
from docingest.processor.models import FailureReason


class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class IngestionError(ProcessorError):
    """Document-level failure carrying a taxonomy value and a user message."""

    def __init__(self, reason: FailureReason, user_message: str | None = None) -> None:
        self.reason = reason
        self.user_message = user_message or message_for(reason)
        super().__init__(f"{reason}: {self.user_message}")


class FileReadError(ProcessorError):
    """Raised when a file cannot be read from disk."""
