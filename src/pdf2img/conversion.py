import asyncio
import dataclasses
import logging
import os
from typing import IO, Optional, Union

from pdf2img import image_utils
from pdf2img.artifacts import ImageFile, derive_image_name
from pdf2img.document import open_first_page
from pdf2img.engine import ensure_engine
from pdf2img.errors import EncodeError, RenderError, describe_error
from pdf2img.rasterizer import BaseRasterizer, PdfiumRasterizer, RenderedPage
from pdf2img.resource_limits import ResourceLimits
from pdf2img.scales import plan_scales

logger = logging.getLogger(__name__)

DocumentInput = Union[bytes, bytearray, memoryview, IO[bytes]]

BLOB_ERROR = "Failed to create image blob"


@dataclasses.dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting a document to an image.

    Either ``image_url`` and ``file`` are both set, or ``error`` is set and
    the other two are empty.
    """

    image_url: str
    file: Optional[ImageFile]
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.error is not None:
            valid = not self.image_url and self.file is None
        else:
            valid = bool(self.image_url) and self.file is not None
        if not valid:
            raise ValueError(
                "ConversionResult needs either image_url and file, or an error"
            )

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str) -> "ConversionResult":
        return cls(image_url="", file=None, error=message)


def _read_payload(data: DocumentInput, limits: ResourceLimits) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        payload = bytes(data)
    else:
        payload = data.read()
    limits.check_file_size(len(payload))
    return payload


def _encode(rendered: RenderedPage, name: str) -> ImageFile:
    data = image_utils.encode_image(rendered.image, image_utils.DEFAULT_IMAGE_FORMAT)
    if not data:
        raise EncodeError(BLOB_ERROR)
    return ImageFile(
        name=derive_image_name(name),
        data=data,
        content_type=image_utils.mime_type(image_utils.DEFAULT_IMAGE_FORMAT),
    )


async def convert_pdf_to_image(
    data: DocumentInput,
    name: str,
    limits: Optional[ResourceLimits] = None,
    rasterizer: Optional[BaseRasterizer] = None,
) -> ConversionResult:
    """Render the first page of a PDF document to a PNG image.

    Args:
        data: PDF bytes, or a binary file-like object to read them from.
        name: Display name of the document, used to name the image.
        limits: Resource limits. If None, limits are read from the
            environment with :meth:`ResourceLimits.default`.
        rasterizer: Rasterizer to render the page with. If None, a
            :class:`PdfiumRasterizer` honoring ``limits`` is used.

    Returns:
        ConversionResult. Failures are reported through its ``error``
        field; this function does not raise.

    Example::

        result = await convert_pdf_to_image(pdf_bytes, "resume.pdf")
        if result.ok:
            result.file.save(result.file.name)  # resume.png
    """
    try:
        limits = limits if limits is not None else ResourceLimits.default()
        if rasterizer is None:
            rasterizer = PdfiumRasterizer(render_timeout=limits.render_timeout)

        payload = _read_payload(data, limits)
        engine = await ensure_engine()
        async with open_first_page(engine, payload) as page:
            scales = plan_scales(page.width, page.height, limits.max_pixel_dimension)
            try:
                rendered = await rasterizer.render(page, scales)
            except RenderError as e:
                return ConversionResult.failure(f"Render failed: {e.cause_message}")

        loop = asyncio.get_running_loop()
        try:
            image_file = await loop.run_in_executor(None, _encode, rendered, name)
        except EncodeError as e:
            logger.error(f"Failed to encode rendered page of {name!r}: {e}")
            return ConversionResult.failure(BLOB_ERROR)

        logger.info(
            f"Converted {name!r} to {image_file.name!r} "
            f"({rendered.image.width}x{rendered.image.height} at scale {rendered.scale})"
        )
        return ConversionResult(
            image_url=image_utils.bytes_to_data_uri(image_file.data),
            file=image_file,
        )
    except Exception as e:
        logger.error(f"Failed to convert {name!r}: {describe_error(e)}")
        return ConversionResult.failure(f"Failed to convert PDF: {describe_error(e)}")


def convert_pdf_to_image_sync(
    data: DocumentInput,
    name: str,
    limits: Optional[ResourceLimits] = None,
    rasterizer: Optional[BaseRasterizer] = None,
) -> ConversionResult:
    """Blocking variant of :func:`convert_pdf_to_image`.

    Must not be called from a running event loop.
    """
    return asyncio.run(convert_pdf_to_image(data, name, limits, rasterizer))


def convert(
    input_path: str,
    output: Optional[str] = None,
    limits: Optional[ResourceLimits] = None,
) -> ConversionResult:
    """Convert the first page of a PDF file to a PNG file.

    Args:
        input_path: Path to the PDF file.
        output: Output file path, or an existing directory to write into.
            If None, the image is written next to the input file.
        limits: Resource limits. If None, read from the environment.

    Returns:
        ConversionResult. The image is only written when it succeeds.
    """
    with open(input_path, "rb") as f:
        result = convert_pdf_to_image_sync(f, os.path.basename(input_path), limits)
    if result.file is None:
        return result

    if output is None:
        output = os.path.join(os.path.dirname(input_path), result.file.name)
    elif os.path.isdir(output):
        output = os.path.join(output, result.file.name)
    result.file.save(output)
    logger.info(f"Saved {output}")
    return result
