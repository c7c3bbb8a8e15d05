"""Exceptions raised by the PDF rasterization pipeline."""

from typing import Optional


class Pdf2ImgError(Exception):
    """Base class for pdf2img errors."""


class EngineInitializationError(Pdf2ImgError):
    """The PDF engine could not be loaded or bound to its worker."""


class DocumentError(Pdf2ImgError):
    """The document or its first page could not be opened."""


class SurfaceUnavailableError(Pdf2ImgError):
    """A drawing context could not be acquired for a render attempt."""


class RenderError(Pdf2ImgError):
    """Every candidate scale failed to render.

    Attributes:
        cause: The error recorded by the last attempt, or None when no
            attempt ran at all.
        attempts: Outcomes of every attempt, in the order they were made.
    """

    def __init__(self, cause: Optional[BaseException], attempts: list) -> None:
        self.cause = cause
        self.attempts = attempts
        super().__init__(self.cause_message)

    @property
    def cause_message(self) -> str:
        if self.cause is None:
            return "Unknown render failure"
        return describe_error(self.cause)


class EncodeError(Pdf2ImgError):
    """The rendered surface could not be serialized to image bytes."""


def describe_error(error: BaseException) -> str:
    """Return a readable message for an exception, falling back to its type."""
    return str(error) or type(error).__name__
