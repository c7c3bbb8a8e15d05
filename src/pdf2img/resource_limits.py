"""Resource limits for PDF rasterization.

This module provides configurable limits that keep a single conversion from
exhausting memory or blocking forever on a malformed or oversized document.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Largest width or height, in pixels, a rendered page may reach.
DEFAULT_MAX_PIXEL_DIMENSION = 4000

DEFAULT_MAX_FILE_SIZE = 2147483648  # 2GB


@dataclass
class ResourceLimits:
    """Resource limits for PDF conversion operations.

    These limits constrain:
    - Input size (prevents memory exhaustion while loading the document)
    - Render attempt duration (prevents a hung render from blocking a call)
    - Rendered pixel dimensions (prevents oversized drawing surfaces)

    Limits can be configured via environment variables or constructor parameters.
    Constructor parameters take precedence over environment variables.

    Environment variables:
        PDF2IMG_MAX_FILE_SIZE: Maximum input size in bytes (default: 2147483648 = 2GB)
        PDF2IMG_RENDER_TIMEOUT: Per-attempt render timeout in seconds
            (default: 0 = wait indefinitely)
        PDF2IMG_MAX_PIXEL_DIMENSION: Maximum rendered width or height in pixels
            (default: 4000)

    Example:
        >>> # Use default limits
        >>> limits = ResourceLimits.default()
        >>>
        >>> # Customize limits
        >>> limits = ResourceLimits(
        ...     max_file_size=50 * 1024 * 1024,  # 50MB
        ...     render_timeout=30,  # 30 seconds per attempt
        ...     max_pixel_dimension=2000,
        ... )
        >>>
        >>> # Disable specific limits (set to 0)
        >>> limits = ResourceLimits(max_file_size=0)  # No file size limit
    """

    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    render_timeout: int = 0  # Unbounded by default
    max_pixel_dimension: int = DEFAULT_MAX_PIXEL_DIMENSION

    @classmethod
    def default(cls) -> "ResourceLimits":
        """Create ResourceLimits with default values from environment variables.

        Returns:
            ResourceLimits instance with values from environment variables,
            falling back to hardcoded defaults if not set.

        Raises:
            ValueError: If environment variable contains invalid integer value.

        Note:
            Negative values are treated as 0 (disabled limit) with a warning logged.
        """

        def parse_env_int(key: str, default: int) -> int:
            value_str = os.environ.get(key)
            if value_str is None:
                return default

            try:
                value = int(value_str)
            except ValueError as e:
                raise ValueError(
                    f"Environment variable {key}={value_str!r} is not a valid integer"
                ) from e

            if value < 0:
                logger.warning(
                    f"Environment variable {key}={value} is negative, "
                    f"treating as 0 (disabled limit). "
                    f"Consider using ResourceLimits.unlimited() instead."
                )
                return 0

            return value

        return cls(
            max_file_size=parse_env_int("PDF2IMG_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE),
            render_timeout=parse_env_int("PDF2IMG_RENDER_TIMEOUT", 0),
            max_pixel_dimension=parse_env_int(
                "PDF2IMG_MAX_PIXEL_DIMENSION", DEFAULT_MAX_PIXEL_DIMENSION
            ),
        )

    @classmethod
    def unlimited(cls) -> "ResourceLimits":
        """Create ResourceLimits with all limits disabled.

        Warning:
            Without a pixel ceiling every page is attempted at the highest
            candidate scale first. Only use this for trusted documents.
        """
        return cls(max_file_size=0, render_timeout=0, max_pixel_dimension=0)

    def is_file_size_limited(self) -> bool:
        """Check if file size limit is enabled."""
        return self.max_file_size > 0

    def is_timeout_enabled(self) -> bool:
        """Check if the per-attempt render timeout is enabled."""
        return self.render_timeout > 0

    def is_pixel_dimension_limited(self) -> bool:
        """Check if the pixel ceiling is enabled."""
        return self.max_pixel_dimension > 0

    def check_file_size(self, size: int) -> None:
        """Raise ValueError if an input of ``size`` bytes exceeds the limit."""
        if self.is_file_size_limited() and size > self.max_file_size:
            raise ValueError(
                f"File size {size} bytes exceeds limit of {self.max_file_size} bytes. "
                f"To process: set PDF2IMG_MAX_FILE_SIZE={size} environment variable, "
                f"or use ResourceLimits(max_file_size={size}) in Python API."
            )
