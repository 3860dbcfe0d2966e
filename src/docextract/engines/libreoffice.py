from __future__ import annotations

import tempfile
from pathlib import Path

from ..contracts import ExtractConfig
from ..runner import ExtractionFailed, ProcessRunner
from .base import OfficeConverter


class LibreOfficeConverter(OfficeConverter):
    """
    Office document -> PDF via headless LibreOffice (`soffice --convert-to pdf`).
    """

    def __init__(self, *, runner: ProcessRunner, config: ExtractConfig | None = None) -> None:
        self.runner = runner
        self.config = config or runner.config

    def convert(self, *, document: Path, out_dir: Path) -> Path:
        target = out_dir / f"{document.stem}.pdf"

        # A private profile per call: soffice refuses to start while another
        # instance holds the default one.
        with tempfile.TemporaryDirectory(prefix="docextract-soffice-") as profile:
            output = self.runner.run(
                [
                    self.config.soffice_bin,
                    f"-env:UserInstallation={Path(profile).as_uri()}",
                    "--headless",
                    "--norestore",
                    "--convert-to",
                    "pdf",
                    "--outdir",
                    str(out_dir),
                ],
                [document],
                capture=True,
            )

        # soffice exits 0 for documents it cannot import.
        if not target.exists():
            raise ExtractionFailed(output if isinstance(output, str) else "no PDF was produced")
        return target
