from __future__ import annotations

import shutil
from pathlib import Path
from typing import Sequence, Union

import structlog

from .contracts import ImageFormat
from .engines.base import ImageConverter, OfficeConverter
from .runner import ExtractionFailed

logger = structlog.get_logger()

DocInput = Union[str, Path, Sequence[Union[str, Path]]]

_RASTER_SUFFIXES = frozenset(f".{f.value}" for f in ImageFormat)


def as_paths(docs: DocInput) -> list[Path]:
    """
    Accept a single path or a sequence of paths; always return a new list.
    """

    if isinstance(docs, (str, Path)):
        return [Path(docs)]
    return [Path(d) for d in docs]


def is_pdf(doc: Path) -> bool:
    return doc.suffix.lower() == ".pdf"


def is_raster_image(doc: Path) -> bool:
    return doc.suffix.lower() in _RASTER_SUFFIXES


class FormatNormalizer:
    """
    Make every input available as a PDF before extraction.

    PDFs pass through untouched. Raster images are converted by the image
    converter, everything else by the office converter. Converted PDFs keep the
    source's stem and land next to the source unless a directory is given.
    """

    def __init__(self, *, office: OfficeConverter, image: ImageConverter) -> None:
        self.office = office
        self.image = image

    def ensure_pdfs(self, docs: DocInput, *, out_dir: Path | None = None) -> list[Path]:
        pdfs: list[Path] = []
        for doc in as_paths(docs):
            if is_pdf(doc):
                pdfs.append(doc)
            else:
                pdfs.append(self.convert(doc, out_dir=out_dir or doc.parent))
        return pdfs

    def extract_pdf(self, docs: DocInput, *, out_dir: Path) -> list[Path]:
        pdfs: list[Path] = []
        for doc in as_paths(docs):
            if is_pdf(doc):
                pdfs.append(self._copy(doc, out_dir=out_dir))
            else:
                pdfs.append(self.convert(doc, out_dir=out_dir))
        return pdfs

    def _copy(self, doc: Path, *, out_dir: Path) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        target = out_dir / doc.name
        if target.resolve() != doc.resolve():
            shutil.copyfile(doc, target)
        return target

    def convert(self, doc: Path, *, out_dir: Path) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        converter = self.image if is_raster_image(doc) else self.office
        logger.info(
            "Converting document to PDF",
            document=str(doc),
            out_dir=str(out_dir),
            converter=type(converter).__name__,
        )
        try:
            return converter.convert(document=doc, out_dir=out_dir)
        except ExtractionFailed as e:
            raise ExtractionFailed(e.output, command=e.command, returncode=e.returncode, document=doc) from e
