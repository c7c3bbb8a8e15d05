"""Loading a PDF document and its first page on the engine worker."""

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from pdf2img.engine import PdfiumEngine
from pdf2img.errors import DocumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageHandle:
    """Read-only view of one page.

    Attributes:
        raw: Backend page object (``pypdfium2.PdfPage``).
        width: Natural page width in PDF points (scale 1).
        height: Natural page height in PDF points (scale 1).
        index: Zero-based page index.
    """

    raw: Any
    width: float
    height: float
    index: int = 0


def _open(pdfium: Any, data: bytes) -> tuple[Any, Any, float, float]:
    document = pdfium.PdfDocument(data)
    try:
        if len(document) == 0:
            raise DocumentError("Document has no pages")
        page = document[0]
        width, height = page.get_size()
    except BaseException:
        document.close()
        raise
    return document, page, float(width), float(height)


def _close(document: Any, page: Any) -> None:
    page.close()
    document.close()


@contextlib.asynccontextmanager
async def open_first_page(
    engine: PdfiumEngine, data: bytes
) -> AsyncIterator[PageHandle]:
    """Open ``data`` as a PDF and yield a handle to its first page.

    The document and page belong to the caller for the duration of the
    ``async with`` block and are closed on the engine worker when it exits.
    Closing waits for any render still running on the worker, including one
    whose caller stopped waiting after a timeout.

    Raises:
        DocumentError: If the document has no pages.
        pypdfium2.PdfiumError: If the data cannot be parsed as a PDF.
    """
    document, page, width, height = await engine.run(_open, engine.pdfium, data)
    logger.debug(f"Opened first page: {width} x {height} pt")
    try:
        yield PageHandle(raw=page, width=width, height=height)
    finally:
        await engine.run(_close, document, page)
