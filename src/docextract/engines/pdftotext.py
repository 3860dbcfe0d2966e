from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Sequence

import structlog

from ..contracts import Dependencies, ExtractConfig, ExtractionOptions, TextFormat
from ..runner import ProcessRunner
from ..text_cleaner import TextCleaner
from .base import InfoExtractor, TextExtractor
from .graphicsmagick import gm_convert_command, gm_environment, pages_to_render

logger = structlog.get_logger()


def text_formats(options: ExtractionOptions) -> list[TextFormat]:
    try:
        return [TextFormat(f) for f in options.format] or [TextFormat.TXT]
    except ValueError as e:
        raise ValueError(f"unsupported text format in {list(options.format)!r}") from e


def fonts_report_is_empty(report: str | None) -> bool:
    """
    `pdffonts` prints a header and a ruler line; with no fonts nothing follows.
    """

    if not report:
        return True
    last = report.rstrip().splitlines()[-1]
    return last.strip(" -") == ""


class PdftotextTextExtractor(TextExtractor):
    """
    Text via poppler's `pdftotext`, with a `tesseract` OCR path.

    OCR runs when forced (`ocr=True`), or in auto mode (`ocr=None`) when the
    document embeds no fonts at all. In auto mode with a page selection,
    pages yielding fewer than `min_text_per_page` bytes are re-read with OCR
    if tesseract is installed.
    """

    def __init__(
        self,
        *,
        runner: ProcessRunner,
        info: InfoExtractor,
        config: ExtractConfig | None = None,
        dependencies: Dependencies | None = None,
        cleaner: TextCleaner | None = None,
    ) -> None:
        self.runner = runner
        self.info = info
        self.config = config or runner.config
        self.dependencies = dependencies or Dependencies()
        self.cleaner = cleaner or TextCleaner()

    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        out_dir = options.output.expanduser().resolve()
        out_dir.mkdir(parents=True, exist_ok=True)
        formats = text_formats(options)

        for pdf in pdfs:
            pdf = Path(pdf)
            pages = None if options.pages is None else pages_to_render(options.pages, info=self.info, pdf=pdf)

            if options.ocr is True or (options.ocr is None and not self._contains_text(pdf)):
                self._extract_from_ocr(pdf=pdf, pages=pages, out_dir=out_dir, formats=formats, options=options)
                continue

            sparse = self._extract_from_pdf(pdf=pdf, pages=pages, out_dir=out_dir, formats=formats)
            if options.ocr is None and sparse and self.dependencies.tesseract:
                logger.info("Re-reading sparse pages with OCR", document=str(pdf), pages=sparse)
                self._extract_from_ocr(pdf=pdf, pages=sparse, out_dir=out_dir, formats=formats, options=options)

    def _contains_text(self, pdf: Path) -> bool:
        report = self.runner.run([self.config.pdffonts_bin], [pdf], capture=True)
        return not fonts_report_is_empty(report if isinstance(report, str) else None)

    def _extract_from_pdf(
        self, *, pdf: Path, pages: list[int] | None, out_dir: Path, formats: list[TextFormat]
    ) -> list[int]:
        """
        Returns the pages whose plain text came out too short.
        """

        sparse: list[int] = []
        for fmt in formats:
            flags = ["-htmlmeta"] if fmt == TextFormat.HTML else []
            if pages is None:
                target = out_dir / f"{pdf.stem}.{fmt.value}"
                self.runner.run([self.config.pdftotext_bin, "-enc", "UTF-8", *flags], [pdf, target])
                continue

            for page in pages:
                target = out_dir / f"{pdf.stem}_{page}.{fmt.value}"
                self.runner.run(
                    [self.config.pdftotext_bin, "-enc", "UTF-8", *flags, "-f", str(page), "-l", str(page)],
                    [pdf, target],
                )
                if fmt == TextFormat.TXT and target.exists():
                    if len(target.read_bytes()) < self.config.min_text_per_page:
                        sparse.append(page)
        return sparse

    def _extract_from_ocr(
        self,
        *,
        pdf: Path,
        pages: list[int] | None,
        out_dir: Path,
        formats: list[TextFormat],
        options: ExtractionOptions,
    ) -> None:
        ocr_flags = ["-density", f"{self.config.ocr_density}x{self.config.ocr_density}", "-colorspace", "GRAY"]

        with tempfile.TemporaryDirectory(prefix="docextract-ocr-") as tempdir:
            env = gm_environment(tempdir)
            if pages is None:
                jobs = [(f"{pdf}", Path(tempdir) / f"{pdf.stem}.tif", out_dir / pdf.stem, ["-despeckle"])]
            else:
                jobs = [
                    (
                        f"{pdf}[{page - 1}]",
                        Path(tempdir) / f"{pdf.stem}_{page}.tif",
                        out_dir / f"{pdf.stem}_{page}",
                        ["-despeckle", "+adjoin"],
                    )
                    for page in pages
                ]

            for source, tiff, base, extra in jobs:
                self.runner.run(gm_convert_command(self.config, *extra, *ocr_flags), [source, tiff], env=env)
                for fmt in formats:
                    self._tesseract(tiff=tiff, base=base, fmt=fmt, options=options)
                tiff.unlink(missing_ok=True)

    def _tesseract(self, *, tiff: Path, base: Path, fmt: TextFormat, options: ExtractionOptions) -> None:
        command = [self.config.tesseract_bin, str(tiff), str(base), "-l", options.language]
        if fmt == TextFormat.HTML:
            self.runner.run([*command, "hocr"])
            hocr = base.with_name(base.name + ".hocr")
            if hocr.exists():
                hocr.replace(base.with_name(base.name + ".html"))
            return

        self.runner.run(command)
        if options.clean:
            self.cleaner.clean_file(base.with_name(base.name + ".txt"))
