"""Rasterizer module for converting PDF pages to raster images.

This module provides the BaseRasterizer, which renders a page by falling back
through candidate scales, and the PdfiumRasterizer that draws pages with
PDFium.
"""

from .base_rasterizer import (
    AttemptOutcome,
    BaseRasterizer,
    DrawingContext,
    RenderedPage,
    RenderSurface,
    Skipped,
    Succeeded,
    Viewport,
)
from .pdfium_rasterizer import PdfiumRasterizer

__all__ = [
    "AttemptOutcome",
    "BaseRasterizer",
    "DrawingContext",
    "PdfiumRasterizer",
    "RenderedPage",
    "RenderSurface",
    "Skipped",
    "Succeeded",
    "Viewport",
]
