from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Sequence

from ..contracts import ExtractConfig, ExtractionOptions, ImageFormat
from ..runner import ProcessRunner
from ..values import page_list
from .base import ImageConverter, ImageExtractor, InfoExtractor


def image_formats(options: ExtractionOptions) -> list[ImageFormat]:
    """
    Requested output formats, png when none were given.
    """

    try:
        return [ImageFormat(f) for f in options.format] or [ImageFormat.PNG]
    except ValueError as e:
        raise ValueError(f"unsupported image format in {list(options.format)!r}") from e


def pages_to_render(pages: object, *, info: InfoExtractor, pdf: Path) -> list[int]:
    if pages is None or (isinstance(pages, str) and pages.strip().lower() == "all"):
        return page_list("all", page_count=info.page_count(pdf))
    return page_list(pages)


def default_quality(fmt: ImageFormat) -> int | None:
    if fmt in (ImageFormat.JPG, ImageFormat.JPEG):
        return 85
    if fmt == ImageFormat.PNG:
        return 100
    return None


def gm_environment(tempdir: str | Path) -> dict[str, str]:
    # Keep GraphicsMagick's scratch files out of the shared /tmp and cap its threads.
    return {"MAGICK_TMPDIR": str(tempdir), "OMP_NUM_THREADS": "2"}


def gm_convert_command(config: ExtractConfig, *args: str) -> list[str]:
    return [
        config.gm_bin,
        "convert",
        "-limit",
        "memory",
        config.memory_limit,
        "-limit",
        "map",
        config.map_limit,
        *args,
    ]


class GraphicsMagickImageExtractor(ImageExtractor):
    """
    Page rasterization via `gm convert`, one invocation per page/size/format.
    """

    def __init__(
        self, *, runner: ProcessRunner, info: InfoExtractor, config: ExtractConfig | None = None
    ) -> None:
        self.runner = runner
        self.info = info
        self.config = config or runner.config

    def _directory_for(self, *, output: Path, size: str | None, sizes: Sequence[str | None]) -> Path:
        directory = output if size is None or len(sizes) == 1 else output / size
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        output = options.output.expanduser().resolve()
        formats = image_formats(options)
        sizes: list[str | None] = list(options.size) or [None]
        density = options.density or self.config.default_density

        for pdf in pdfs:
            pdf = Path(pdf)
            pages = pages_to_render(options.pages, info=self.info, pdf=pdf)
            for size in sizes:
                directory = self._directory_for(output=output, size=size, sizes=sizes)
                for fmt in formats:
                    self._convert(
                        pdf=pdf,
                        pages=pages,
                        directory=directory,
                        size=size,
                        fmt=fmt,
                        density=density,
                        options=options,
                    )

    def _convert(
        self,
        *,
        pdf: Path,
        pages: list[int],
        directory: Path,
        size: str | None,
        fmt: ImageFormat,
        density: int,
        options: ExtractionOptions,
    ) -> None:
        args = ["+adjoin", "-define", "pdf:use-cropbox=true", "-density", str(density)]
        if size is not None:
            args += ["-resize", size]
        if options.rotate:
            args += ["-rotate", str(options.rotate)]
        quality = options.quality if options.quality is not None else default_quality(fmt)
        if quality is not None:
            args += ["-quality", str(quality)]

        with tempfile.TemporaryDirectory(prefix="docextract-gm-") as tempdir:
            for page in pages:
                out_file = directory / f"{pdf.stem}_{page}.{fmt.value}"
                self.runner.run(
                    gm_convert_command(self.config, *args),
                    [f"{pdf}[{page - 1}]", out_file],
                    env=gm_environment(tempdir),
                )


class GraphicsMagickImageConverter(ImageConverter):
    """
    Raster image -> single PDF via `gm convert`.
    """

    def __init__(self, *, runner: ProcessRunner, config: ExtractConfig | None = None) -> None:
        self.runner = runner
        self.config = config or runner.config

    def convert(self, *, document: Path, out_dir: Path) -> Path:
        target = out_dir / f"{document.stem}.pdf"
        with tempfile.TemporaryDirectory(prefix="docextract-gm-") as tempdir:
            self.runner.run([self.config.gm_bin, "convert"], [document, target], env=gm_environment(tempdir))
        return target
