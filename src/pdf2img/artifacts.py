"""Named image artifacts produced by a conversion."""

import dataclasses
import io
import re

from pdf2img import image_utils

SOURCE_EXTENSION_RE = re.compile(r"\.pdf$", re.IGNORECASE)

DEFAULT_STEM = "document"


def derive_image_name(name: str, format: str = image_utils.DEFAULT_IMAGE_FORMAT) -> str:
    """Derive the artifact name from the source document's name.

    A trailing ``.pdf`` (any case) is replaced by the image extension; any
    other name keeps its full text and gets the extension appended.

    Example:
        >>> derive_image_name("resume.PDF")
        'resume.png'
        >>> derive_image_name("resume")
        'resume.png'
    """
    stem = SOURCE_EXTENSION_RE.sub("", name) or DEFAULT_STEM
    return f"{stem}.{format.lower()}"


@dataclasses.dataclass(frozen=True)
class ImageFile:
    """Encoded image bytes with a file name and content type."""

    name: str
    data: bytes = dataclasses.field(repr=False)
    content_type: str = "image/png"

    @property
    def size(self) -> int:
        return len(self.data)

    def open(self) -> io.BytesIO:
        """Return a new binary stream positioned at the start of the data."""
        return io.BytesIO(self.data)

    def save(self, path: str) -> None:
        with open(path, "wb") as f:
            f.write(self.data)
