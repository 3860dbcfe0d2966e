from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from ..contracts import ExtractConfig, ExtractionOptions, MetadataKey
from ..runner import ProcessRunner
from .base import InfoExtractor

# One `pdfinfo` line per key.
_FIELDS: dict[MetadataKey, re.Pattern[str]] = {
    MetadataKey.AUTHOR: re.compile(r"^Author:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.DATE: re.compile(r"^CreationDate:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.CREATOR: re.compile(r"^Creator:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.KEYWORDS: re.compile(r"^Keywords:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.PRODUCER: re.compile(r"^Producer:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.SUBJECT: re.compile(r"^Subject:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.TITLE: re.compile(r"^Title:[ \t]*(.*)$", re.MULTILINE),
    MetadataKey.LENGTH: re.compile(r"^Pages:[ \t]*(\d+)", re.MULTILINE),
}


def parse_pdfinfo(report: str | None, key: MetadataKey) -> str | int | None:
    """
    Pick one field out of a `pdfinfo` report. Absent or blank fields are None.
    """

    if not report:
        return None
    match = _FIELDS[key].search(report)
    if match is None:
        return None
    value = match.group(1).strip()
    if not value:
        return None
    return int(value) if key == MetadataKey.LENGTH else value


class PdfinfoInfoExtractor(InfoExtractor):
    """
    Metadata via poppler's `pdfinfo`. Only the first document is inspected.
    """

    def __init__(self, *, runner: ProcessRunner, config: ExtractConfig | None = None) -> None:
        self.runner = runner
        self.config = config or runner.config

    def _report(self, pdfs: Sequence[Path]) -> str | None:
        if not pdfs:
            raise ValueError("at least one document is required")
        out = self.runner.run([self.config.pdfinfo_bin, "-enc", "UTF-8"], [pdfs[0]], capture=True)
        return out if isinstance(out, str) else None

    def extract(
        self, *, key: MetadataKey, pdfs: Sequence[Path], options: ExtractionOptions
    ) -> str | int | None:
        return parse_pdfinfo(self._report(pdfs), MetadataKey(key))

    def extract_all(self, *, pdfs: Sequence[Path]) -> dict[MetadataKey, str | int | None]:
        report = self._report(pdfs)
        return {key: parse_pdfinfo(report, key) for key in MetadataKey}
