from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..contracts import ExtractConfig, ExtractionOptions
from ..runner import ProcessRunner
from ..values import page_list
from .base import PageExtractor

# pdftk writes a report of the burst into its working directory.
_BURST_REPORT = "doc_data.txt"


class PdftkPageExtractor(PageExtractor):
    """
    Page bursting via the `pdftk` CLI.

    Without a page selection the whole document is burst in a single call;
    with one, each selected page is cut out with `cat`.
    """

    def __init__(self, *, runner: ProcessRunner, config: ExtractConfig | None = None) -> None:
        self.runner = runner
        self.config = config or runner.config

    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        out_dir = options.output.expanduser().resolve()
        out_dir.mkdir(parents=True, exist_ok=True)

        for pdf in pdfs:
            # Burst runs inside out_dir, so relative inputs must be anchored first.
            pdf = Path(pdf).expanduser().resolve()
            stem = pdf.stem
            if options.pages is None or str(options.pages).strip().lower() == "all":
                self._burst(pdf=pdf, out_dir=out_dir, stem=stem)
            else:
                for page in page_list(options.pages):
                    self.runner.run(
                        [self.config.pdftk_bin, str(pdf), "cat", str(page), "output"],
                        [out_dir / f"{stem}_{page}.pdf"],
                    )

    def _burst(self, *, pdf: Path, out_dir: Path, stem: str) -> None:
        report = out_dir / _BURST_REPORT
        existed = report.exists()
        try:
            self.runner.run(
                [self.config.pdftk_bin, str(pdf), "burst", "output", str(out_dir / f"{stem}_%d.pdf")],
                cwd=out_dir,
            )
        finally:
            if not existed and report.exists():
                report.unlink()
