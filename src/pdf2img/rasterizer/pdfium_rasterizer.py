"""PDFium-based rasterizer module.

This module renders PDF pages with PDFium via pypdfium2. All PDFium calls
run on the process-wide engine worker thread.
"""

import logging
from typing import Any, Optional

from pdf2img.document import PageHandle
from pdf2img.engine import PdfiumEngine, ensure_engine

from .base_rasterizer import BaseRasterizer, DrawingContext, Viewport

logger = logging.getLogger(__name__)


class PdfiumRasterizer(BaseRasterizer):
    """Page rasterizer using PDFium.

    Each attempt asks PDFium for a bitmap of the page at the attempt's scale
    and paints it into the attempt's drawing context. PDFium sizes its
    bitmap independently, so an off-by-one difference from the surface is
    absorbed by resampling with the context's filter.

    The render timeout covers the PDFium call itself. A timed out render
    keeps the engine worker busy until it returns, so the next scale starts
    once it does.

    Example::

        rasterizer = PdfiumRasterizer(render_timeout=30)
        engine = await ensure_engine()
        async with open_first_page(engine, pdf_bytes) as page:
            scales = plan_scales(page.width, page.height)
            rendered = await rasterizer.render(page, scales)
        rendered.image.save("page.png")
    """

    def __init__(
        self,
        render_timeout: int = 0,
        draw_annots: bool = True,
        engine: Optional[PdfiumEngine] = None,
    ) -> None:
        """Initialize the PDFium rasterizer.

        Args:
            render_timeout: Maximum seconds to wait for a single render
                attempt. If 0 (default), attempts are not time limited.
            draw_annots: Whether to render annotations such as form fields
                and comments. Default is True.
            engine: Engine to render with. If None, the process-wide engine
                is used.
        """
        super().__init__(render_timeout=render_timeout)
        self.draw_annots = draw_annots
        self._engine = engine

    async def _draw(
        self, page: PageHandle, context: DrawingContext, viewport: Viewport
    ) -> None:
        engine = self._engine or await ensure_engine()
        await engine.run_with_deadline(
            self.render_timeout, self._draw_sync, page.raw, context, viewport.scale
        )

    def _draw_sync(self, raw_page: Any, context: DrawingContext, scale: float) -> None:
        """Render and paint on the engine worker thread."""
        bitmap = raw_page.render(scale=scale, draw_annots=self.draw_annots)
        try:
            # to_pil() may share the bitmap buffer, so paint before closing.
            context.paint(bitmap.to_pil())
        finally:
            bitmap.close()
