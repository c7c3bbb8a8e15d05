import base64
import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_FORMAT = "PNG"


def encode_image(image: Image.Image, format: str = DEFAULT_IMAGE_FORMAT) -> bytes:
    """Encode a PIL image to bytes in the specified format."""
    with io.BytesIO() as output:
        image.save(output, format=format.upper())
        return output.getvalue()


def bytes_to_data_uri(data: bytes, format: str = DEFAULT_IMAGE_FORMAT) -> str:
    """Wrap already encoded image bytes in a base64 data URI."""
    base64_data = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type(format)};base64,{base64_data}"


def mime_type(format: str) -> str:
    """Return the MIME type for a Pillow format name."""
    return Image.MIME.get(format.upper(), f"image/{format.lower()}")
