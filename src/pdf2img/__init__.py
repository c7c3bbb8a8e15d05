from logging import getLogger

from pdf2img.artifacts import ImageFile, derive_image_name
from pdf2img.conversion import (
    ConversionResult,
    convert,
    convert_pdf_to_image,
    convert_pdf_to_image_sync,
)
from pdf2img.engine import ensure_engine, reset_engine
from pdf2img.resource_limits import ResourceLimits
from pdf2img.scales import plan_scales
from pdf2img.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "ConversionResult",
    "ImageFile",
    "ResourceLimits",
    "convert",
    "convert_pdf_to_image",
    "convert_pdf_to_image_sync",
    "derive_image_name",
    "ensure_engine",
    "plan_scales",
    "reset_engine",
]
