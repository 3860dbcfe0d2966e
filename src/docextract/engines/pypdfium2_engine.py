from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Sequence

from ..contracts import ExtractConfig, ExtractionOptions, ImageFormat
from ..runner import ExtractionFailed
from ..values import page_list
from .base import ImageExtractor
from .graphicsmagick import image_formats

_PIL_FORMATS: dict[ImageFormat, str] = {
    ImageFormat.PNG: "PNG",
    ImageFormat.GIF: "GIF",
    ImageFormat.JPG: "JPEG",
    ImageFormat.JPEG: "JPEG",
    ImageFormat.TIF: "TIFF",
    ImageFormat.TIFF: "TIFF",
    ImageFormat.BMP: "BMP",
    ImageFormat.PNM: "PPM",
    ImageFormat.PPM: "PPM",
    ImageFormat.EPS: "EPS",
}

_GEOMETRY = re.compile(r"^(?P<w>\d+)?(?:x(?P<h>\d+)?)?(?P<exact>!)?$")


def fit_geometry(size: str, *, width: int, height: int) -> tuple[int, int]:
    """
    Resolve a GraphicsMagick-style geometry ("1000x", "x600", "800x600",
    "800x600!") against an image size. Aspect ratio is kept unless "!" is given.
    """

    m = _GEOMETRY.match(size.strip())
    if m is None or (m.group("w") is None and m.group("h") is None):
        raise ValueError(f"unsupported size geometry: {size!r}")

    w = int(m.group("w")) if m.group("w") else None
    h = int(m.group("h")) if m.group("h") else None
    if m.group("exact") and w and h:
        return w, h

    scales = []
    if w:
        scales.append(w / width)
    if h:
        scales.append(h / height)
    scale = min(scales)
    return max(1, round(width * scale)), max(1, round(height * scale))


class Pypdfium2ImageExtractor(ImageExtractor):
    """
    In-process rasterization with PDFium; same file layout as the gm engine.
    """

    def __init__(self, config: ExtractConfig | None = None) -> None:
        self.config = config or ExtractConfig()

    def _require_pdfium(self):
        try:
            import pypdfium2 as pdfium  # type: ignore

            return pdfium
        except ImportError as e:
            raise RuntimeError("Missing dependency: pypdfium2 is required for in-process rendering.") from e

    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        pdfium = self._require_pdfium()
        output = options.output.expanduser().resolve()
        formats = image_formats(options)
        unsupported = [f.value for f in formats if f not in _PIL_FORMATS]
        if unsupported:
            raise ValueError(f"pypdfium2 backend cannot write: {unsupported}")
        sizes: list[str | None] = list(options.size) or [None]
        density = options.density or self.config.default_density

        for pdf in pdfs:
            pdf = Path(pdf)
            try:
                doc = pdfium.PdfDocument(str(pdf))
            except pdfium.PdfiumError as e:
                raise ExtractionFailed(str(e), document=pdf) from e
            try:
                pages = page_list(options.pages, page_count=len(doc))
                for page_num in pages:
                    rendered = self._render(doc=doc, page_num=page_num, density=density)
                    for size in sizes:
                        directory = output if size is None or len(sizes) == 1 else output / size
                        directory.mkdir(parents=True, exist_ok=True)
                        image = rendered
                        if size is not None:
                            image = rendered.resize(fit_geometry(size, width=rendered.width, height=rendered.height))
                        if options.rotate:
                            # Positive degrees rotate clockwise, as with `gm -rotate`.
                            image = image.rotate(-options.rotate, expand=True)
                        for fmt in formats:
                            self._save(
                                image=image,
                                out_file=directory / f"{pdf.stem}_{page_num}.{fmt.value}",
                                fmt=fmt,
                                quality=options.quality,
                            )
            finally:
                doc.close()

    def _render(self, *, doc: Any, page_num: int, density: int):
        pdfium = self._require_pdfium()
        scale = density / 72.0  # PDF points are 1/72 inch
        try:
            page = doc[page_num - 1]
            pil_img = page.render(scale=scale).to_pil().convert("RGB")
        except pdfium.PdfiumError as e:
            raise ExtractionFailed(str(e)) from e
        return pil_img

    def _save(self, *, image: Any, out_file: Path, fmt: ImageFormat, quality: int | None) -> None:
        params: dict[str, Any] = {}
        if _PIL_FORMATS[fmt] == "JPEG":
            params["quality"] = quality if quality is not None else 85
        try:
            image.save(out_file, format=_PIL_FORMATS[fmt], **params)
        except OSError as e:
            raise ExtractionFailed(str(e), document=out_file) from e
