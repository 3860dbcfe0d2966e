from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from ..contracts import ExtractionOptions, MetadataKey


class PageExtractor(ABC):
    """
    Burst PDFs into one PDF per page, named `<stem>_<page>.pdf`.
    """

    @abstractmethod
    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        raise NotImplementedError


class TextExtractor(ABC):
    """
    Write the text of each PDF to `<stem>.<fmt>` (or `<stem>_<page>.<fmt>`).
    """

    @abstractmethod
    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        raise NotImplementedError


class ImageExtractor(ABC):
    """
    Rasterize pages to `<stem>_<page>.<fmt>`, once per size and format.

    `options.pages` has already been flattened by `normalize_value`. The page
    is fitted to `size` first and rotated afterwards, so a geometry always
    describes the unrotated page.
    """

    @abstractmethod
    def extract(self, *, pdfs: Sequence[Path], options: ExtractionOptions) -> None:
        raise NotImplementedError


class InfoExtractor(ABC):
    """
    Read document metadata. Values are returned, never written to disk.
    """

    @abstractmethod
    def extract(
        self, *, key: MetadataKey, pdfs: Sequence[Path], options: ExtractionOptions
    ) -> str | int | None:
        raise NotImplementedError

    @abstractmethod
    def extract_all(self, *, pdfs: Sequence[Path]) -> dict[MetadataKey, str | int | None]:
        raise NotImplementedError

    def page_count(self, pdf: Path) -> int:
        length = self.extract(key=MetadataKey.LENGTH, pdfs=[pdf], options=ExtractionOptions())
        return int(length or 0)


class OfficeConverter(ABC):
    """
    Convert an office document (doc, rtf, ppt, ...) to `<out_dir>/<stem>.pdf`.
    """

    @abstractmethod
    def convert(self, *, document: Path, out_dir: Path) -> Path:
        raise NotImplementedError


class ImageConverter(ABC):
    """
    Convert a raster image to `<out_dir>/<stem>.pdf`.
    """

    @abstractmethod
    def convert(self, *, document: Path, out_dir: Path) -> Path:
        raise NotImplementedError
