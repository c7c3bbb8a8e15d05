"""Base rasterizer and the multi-scale render attempt loop.

Each attempt projects the page at one scale, allocates a fresh surface and
asks the concrete rasterizer to draw into it. Failures at one scale are
recorded and the loop moves on to the next lower scale.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from PIL import Image

from pdf2img.document import PageHandle
from pdf2img.errors import RenderError, SurfaceUnavailableError, describe_error

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Viewport:
    """Page geometry projected at one scale."""

    width: float
    height: float
    scale: float

    @classmethod
    def for_page(cls, page: PageHandle, scale: float) -> "Viewport":
        return cls(width=page.width * scale, height=page.height * scale, scale=scale)

    @property
    def pixel_size(self) -> tuple[int, int]:
        return round_half_up(self.width), round_half_up(self.height)


@dataclass
class DrawingContext:
    """Drawable side of a render surface.

    Attributes:
        image: Pixel buffer the page is painted into.
        smoothing: Whether to interpolate when the source must be resized.
        resample: Pillow filter used when ``smoothing`` is enabled.
    """

    image: Image.Image
    smoothing: bool = False
    resample: Image.Resampling = Image.Resampling.BILINEAR

    def paint(self, source: Image.Image) -> None:
        """Copy ``source`` into the buffer, fitting it to the buffer size."""
        if source.size != self.image.size:
            resample = self.resample if self.smoothing else Image.Resampling.NEAREST
            source = source.resize(self.image.size, resample=resample)
        if source.mode != self.image.mode:
            source = source.convert(self.image.mode)
        self.image.paste(source, (0, 0))


class RenderSurface:
    """Drawing target for a single render attempt.

    The pixel buffer is only allocated when the context is first requested.
    A surface is never reused once its attempt has finished.
    """

    mode = "RGB"
    background = (255, 255, 255)

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._context: Optional[DrawingContext] = None

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def image(self) -> Optional[Image.Image]:
        return self._context.image if self._context is not None else None

    def get_context(self) -> Optional[DrawingContext]:
        """Return the drawing context, or None if it cannot be acquired."""
        if self._context is not None:
            return self._context
        if self.width <= 0 or self.height <= 0:
            logger.debug(f"Surface {self.width}x{self.height} has no area")
            return None
        try:
            image = Image.new(self.mode, self.size, self.background)
        except (MemoryError, ValueError) as e:
            logger.debug(f"Failed to allocate {self.width}x{self.height} surface: {e}")
            return None
        self._context = DrawingContext(image)
        return self._context


@dataclass(frozen=True)
class Succeeded:
    scale: float
    surface: RenderSurface
    viewport: Viewport


@dataclass(frozen=True)
class Skipped:
    scale: float
    phase: str  # "context" or "render"
    cause: BaseException


AttemptOutcome = Union[Succeeded, Skipped]


@dataclass
class RenderedPage:
    """Result of a successful render loop."""

    image: Image.Image
    viewport: Viewport
    scale: float
    attempts: list[AttemptOutcome] = field(default_factory=list)


def _event(scale: Optional[float], phase: str, cause: Any = None) -> dict[str, Any]:
    return {
        "scale": scale,
        "phase": phase,
        "cause": describe_error(cause) if isinstance(cause, BaseException) else cause,
    }


class BaseRasterizer(ABC):
    """Base class for page rasterizer implementations.

    Renders a page by trying candidate scales from the highest down, each on
    a freshly allocated surface, and keeps the first one that succeeds.
    Subclasses implement :meth:`_draw` to paint the page into a context and
    apply :attr:`render_timeout` to the drawing itself.
    """

    def __init__(self, render_timeout: int = 0) -> None:
        """Initialize the rasterizer.

        Args:
            render_timeout: Maximum seconds to wait for a single render
                attempt. If 0 (default), attempts are not time limited.
        """
        self.render_timeout = render_timeout

    async def render(self, page: PageHandle, scales: Sequence[float]) -> RenderedPage:
        """Render ``page`` at the first scale in ``scales`` that succeeds.

        Args:
            page: Page to render.
            scales: Candidate scales, highest fidelity first.

        Returns:
            RenderedPage holding the painted image and the chosen viewport.

        Raises:
            RenderError: If every scale failed. Carries the last recorded
                error and the outcome of each attempt.
        """
        attempts: list[AttemptOutcome] = []
        last_error: Optional[BaseException] = None
        for scale in scales:
            outcome = await self._attempt(page, scale)
            attempts.append(outcome)
            if isinstance(outcome, Succeeded):
                image = outcome.surface.image
                assert image is not None
                logger.debug(
                    f"Render succeeded at scale {scale}",
                    extra=_event(scale, "render"),
                )
                return RenderedPage(
                    image=image,
                    viewport=outcome.viewport,
                    scale=scale,
                    attempts=attempts,
                )
            last_error = outcome.cause

        error = RenderError(last_error, attempts)
        logger.error(
            f"All render attempts failed: {error.cause_message}",
            extra=_event(None, "exhausted", error.cause_message),
        )
        raise error

    async def _attempt(self, page: PageHandle, scale: float) -> AttemptOutcome:
        viewport = Viewport.for_page(page, scale)
        surface = self._allocate_surface(viewport)
        context = surface.get_context()
        if context is None:
            cause = SurfaceUnavailableError("Drawing context unavailable")
            logger.warning(
                f"Drawing context unavailable at scale {scale}",
                extra=_event(scale, "context", cause),
            )
            return Skipped(scale=scale, phase="context", cause=cause)

        context.smoothing = True
        context.resample = Image.Resampling.LANCZOS

        logger.debug(
            f"Attempting render at scale {scale} size {surface.width}x{surface.height}",
            extra=_event(scale, "render"),
        )
        try:
            await self._draw(page, context, viewport)
        except Exception as e:
            logger.warning(
                f"Render error at scale {scale}: {describe_error(e)}",
                extra=_event(scale, "render", e),
            )
            return Skipped(scale=scale, phase="render", cause=e)
        return Succeeded(scale=scale, surface=surface, viewport=viewport)

    def _allocate_surface(self, viewport: Viewport) -> RenderSurface:
        return RenderSurface(*viewport.pixel_size)

    @abstractmethod
    async def _draw(
        self, page: PageHandle, context: DrawingContext, viewport: Viewport
    ) -> None:
        """Paint ``page`` at ``viewport`` into ``context``.

        Raising any exception marks the attempt as failed. When
        ``render_timeout`` is positive, a drawing that runs longer must raise
        :class:`TimeoutError`.
        """
        raise NotImplementedError
