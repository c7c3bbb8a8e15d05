"""Tests for convert_pdf_to_image() and related entry points."""

import asyncio
import base64
import io
import os
from pathlib import Path
from typing import Any, Callable

import pytest

from pdf2img import (
    ConversionResult,
    ImageFile,
    ResourceLimits,
    convert,
    convert_pdf_to_image,
    convert_pdf_to_image_sync,
    engine,
    image_utils,
)
from pdf2img.document import PageHandle
from pdf2img.rasterizer import DrawingContext, PdfiumRasterizer, Viewport

from conftest import decode_image


class FailingRasterizer(PdfiumRasterizer):
    """PDFium rasterizer whose every render attempt fails."""

    def __init__(self) -> None:
        super().__init__()
        self.scales: list[float] = []

    async def _draw(
        self, page: PageHandle, context: DrawingContext, viewport: Viewport
    ) -> None:
        self.scales.append(viewport.scale)
        raise RuntimeError(f"out of memory at scale {viewport.scale}")


def convert_bytes(data: Any, name: str, **kwargs: Any) -> ConversionResult:
    return asyncio.run(convert_pdf_to_image(data, name, **kwargs))


class TestConvertPdfToImage:
    """Tests for successful conversions."""

    def test_converts_first_page(self, simple_pdf: bytes) -> None:
        """Test a one-page PDF converts to a named PNG artifact and URL."""
        result = convert_bytes(simple_pdf, "resume.pdf")

        assert result.ok
        assert result.error is None
        assert isinstance(result.file, ImageFile)
        assert result.file.name == "resume.png"
        assert result.file.content_type == "image/png"
        assert result.image_url.startswith("data:image/png;base64,")

        image = decode_image(result.file.data)
        assert image.format == "PNG"
        assert image.size == (800, 1200)

    def test_url_and_file_share_bytes(self, simple_pdf: bytes) -> None:
        """Test the image URL and the artifact reference the same bytes."""
        result = convert_bytes(simple_pdf, "resume.pdf")

        assert result.file is not None
        _, encoded = result.image_url.split(",", 1)
        assert base64.b64decode(encoded) == result.file.data
        assert result.file.open().read() == result.file.data
        assert result.file.size == len(result.file.data)

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("resume.pdf", "resume.png"),
            ("resume", "resume.png"),
            ("Resume.PDF", "Resume.png"),
            ("scan.final.pdf", "scan.final.png"),
        ],
    )
    def test_artifact_name(self, simple_pdf: bytes, name: str, expected: str) -> None:
        """Test the artifact name is derived from the display name."""
        result = convert_bytes(simple_pdf, name)
        assert result.file is not None
        assert result.file.name == expected

    def test_accepts_file_like_input(self, simple_pdf: bytes) -> None:
        """Test a binary stream is accepted as input."""
        result = convert_bytes(io.BytesIO(simple_pdf), "resume.pdf")
        assert result.ok

    def test_multi_page_document_renders_first_page(
        self, pdf_factory: Callable[..., bytes]
    ) -> None:
        """Test only the first page of a multi-page document is rendered."""
        result = convert_bytes(pdf_factory(100, 150, pages=3), "multi.pdf")

        assert result.file is not None
        assert decode_image(result.file.data).size == (400, 600)

    def test_pixel_ceiling_from_limits(self, simple_pdf: bytes) -> None:
        """Test the configured pixel ceiling bounds the output size."""
        result = convert_bytes(
            simple_pdf, "resume.pdf", limits=ResourceLimits(max_pixel_dimension=600)
        )

        assert result.file is not None
        assert decode_image(result.file.data).size == (400, 600)

    def test_concurrent_conversions_initialize_engine_once(
        self, simple_pdf: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test concurrent conversions share a single engine initialization."""
        calls: list[int] = []
        real_loader = engine._load_backend

        def loader() -> Any:
            calls.append(1)
            return real_loader()

        monkeypatch.setattr(engine, "_load_backend", loader)

        async def main() -> list[ConversionResult]:
            return await asyncio.gather(
                *(convert_pdf_to_image(simple_pdf, f"doc{i}.pdf") for i in range(5))
            )

        results = asyncio.run(main())

        assert len(calls) == 1
        assert [r.file.name for r in results if r.file] == [
            f"doc{i}.png" for i in range(5)
        ]


class TestConvertPdfToImageFailures:
    """Tests for the failure contract: errors are returned, never raised."""

    def test_all_render_attempts_fail(self, simple_pdf: bytes) -> None:
        """Test a total render failure is reported with the last cause."""
        rasterizer = FailingRasterizer()

        result = convert_bytes(simple_pdf, "resume.pdf", rasterizer=rasterizer)

        assert result.image_url == ""
        assert result.file is None
        assert result.error == "Render failed: out of memory at scale 0.75"
        assert rasterizer.scales == [4.0, 2.0, 1.0, 0.75]

    def test_empty_encoding(
        self, simple_pdf: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an encoder producing no bytes yields the blob error."""
        monkeypatch.setattr(image_utils, "encode_image", lambda *args, **kwargs: b"")

        result = convert_bytes(simple_pdf, "resume.pdf")

        assert result.image_url == ""
        assert result.file is None
        assert result.error == "Failed to create image blob"

    @pytest.mark.parametrize("data", [b"not a pdf", b"", b"%PDF-1.7\n%%EOF"])
    def test_malformed_input(self, data: bytes) -> None:
        """Test malformed input yields a conversion failure."""
        result = convert_bytes(data, "broken.pdf")

        assert result.image_url == ""
        assert result.file is None
        assert result.error is not None
        assert result.error.startswith("Failed to convert PDF: ")

    def test_engine_initialization_failure(
        self, simple_pdf: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an engine failure is reported and the next call can retry."""

        def broken_loader() -> Any:
            raise ImportError("pdfium library not found")

        monkeypatch.setattr(engine, "_load_backend", broken_loader)
        result = convert_bytes(simple_pdf, "resume.pdf")

        assert result.error == (
            "Failed to convert PDF: Failed to initialize PDF engine: "
            "pdfium library not found"
        )

        monkeypatch.undo()
        assert convert_bytes(simple_pdf, "resume.pdf").ok

    def test_file_size_limit(self, simple_pdf: bytes) -> None:
        """Test inputs larger than the limit are rejected."""
        result = convert_bytes(
            simple_pdf, "resume.pdf", limits=ResourceLimits(max_file_size=10)
        )

        assert result.error is not None
        assert result.error.startswith("Failed to convert PDF: File size")
        assert "exceeds limit of 10 bytes" in result.error

    def test_invalid_environment_configuration(
        self, simple_pdf: bytes, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a bad environment variable is reported, not raised."""
        monkeypatch.setenv("PDF2IMG_RENDER_TIMEOUT", "soon")

        result = convert_bytes(simple_pdf, "resume.pdf")

        assert result.error is not None
        assert "PDF2IMG_RENDER_TIMEOUT='soon' is not a valid integer" in result.error

    def test_unreadable_stream(self) -> None:
        """Test a stream that fails to read yields a conversion failure."""

        class BrokenStream(io.RawIOBase):
            def read(self, size: int = -1) -> bytes:
                raise OSError("disk detached")

        result = convert_bytes(BrokenStream(), "resume.pdf")
        assert result.error == "Failed to convert PDF: disk detached"


class TestConversionResult:
    """Tests for the ConversionResult invariant."""

    def test_failure_factory(self) -> None:
        """Test failure() builds an empty result with an error."""
        result = ConversionResult.failure("boom")
        assert (result.image_url, result.file, result.error) == ("", None, "boom")
        assert not result.ok

    @pytest.mark.parametrize(
        "image_url, has_file, error",
        [
            ("", False, None),
            ("data:,", False, None),
            ("", True, None),
            ("data:,", True, "boom"),
            ("data:,", False, "boom"),
        ],
    )
    def test_invalid_combinations_rejected(
        self, image_url: str, has_file: bool, error: str | None
    ) -> None:
        """Test results must be either a success or a failure."""
        file = ImageFile(name="a.png", data=b"x") if has_file else None
        with pytest.raises(ValueError):
            ConversionResult(image_url=image_url, file=file, error=error)


class TestSyncEntryPoints:
    """Tests for the blocking wrappers."""

    def test_convert_pdf_to_image_sync(self, simple_pdf: bytes) -> None:
        """Test the sync wrapper returns the same kind of result."""
        result = convert_pdf_to_image_sync(simple_pdf, "resume.pdf")
        assert result.ok
        assert result.file is not None
        assert result.file.name == "resume.png"

    def test_convert_writes_next_to_input(self, tmp_path: Path, simple_pdf: bytes) -> None:
        """Test convert() writes the PNG beside the PDF by default."""
        input_path = tmp_path / "resume.pdf"
        input_path.write_bytes(simple_pdf)

        result = convert(str(input_path))

        output_path = tmp_path / "resume.png"
        assert result.ok
        assert output_path.read_bytes() == result.file.data  # type: ignore[union-attr]

    def test_convert_into_directory(self, tmp_path: Path, simple_pdf: bytes) -> None:
        """Test convert() writes into an existing output directory."""
        input_path = tmp_path / "resume.pdf"
        input_path.write_bytes(simple_pdf)
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        convert(str(input_path), str(out_dir))

        assert (out_dir / "resume.png").exists()

    def test_convert_to_file(self, tmp_path: Path, simple_pdf: bytes) -> None:
        """Test convert() writes to an explicit output path."""
        input_path = tmp_path / "resume.pdf"
        input_path.write_bytes(simple_pdf)
        output_path = tmp_path / "page.png"

        convert(str(input_path), str(output_path))

        assert decode_image(output_path.read_bytes()).size == (800, 1200)

    def test_convert_failure_writes_nothing(self, tmp_path: Path) -> None:
        """Test convert() leaves no output behind when conversion fails."""
        input_path = tmp_path / "broken.pdf"
        input_path.write_bytes(b"garbage")

        result = convert(str(input_path))

        assert result.error is not None
        assert os.listdir(tmp_path) == ["broken.pdf"]
