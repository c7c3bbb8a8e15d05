import io
import logging
from typing import Callable, Iterator

import pytest
from PIL import Image

from pdf2img import engine

logger = logging.getLogger(__name__)


def make_pdf(
    width: int = 200, height: int = 300, color: str = "red", pages: int = 1
) -> bytes:
    """Create a PDF whose pages are solid ``color`` and ``width`` x ``height`` pt.

    Pillow writes one page per image, sized in points at 72 DPI.
    """
    images = [Image.new("RGB", (width, height), color) for _ in range(pages)]
    with io.BytesIO() as output:
        images[0].save(
            output,
            format="PDF",
            resolution=72.0,
            save_all=True,
            append_images=images[1:],
        )
        return output.getvalue()


def decode_image(data: bytes) -> Image.Image:
    """Decode encoded image bytes to a loaded PIL image."""
    with io.BytesIO(data) as input:
        image = Image.open(input)
        image.load()
    return image


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    """Factory producing PDF bytes for a given page size."""
    return make_pdf


@pytest.fixture
def simple_pdf() -> bytes:
    """Single 200x300 pt red page."""
    return make_pdf()


@pytest.fixture(autouse=True)
def fresh_engine() -> Iterator[None]:
    """Start and finish every test with an uninitialized engine."""
    engine.reset_engine()
    yield
    engine.reset_engine()
