from __future__ import annotations

import os
import shutil

import structlog

from .contracts import Dependencies, ExtractConfig

logger = structlog.get_logger()


def _search_path(config: ExtractConfig) -> str:
    dirs = [str(p) for p in config.search_path]
    return os.pathsep.join([*dirs, os.environ.get("PATH", "")])


def probe_dependencies(config: ExtractConfig | None = None, *, warn: bool = True) -> Dependencies:
    """
    Look up every engine binary once and record which ones are present.

    Absent engines are logged as warnings; nothing is raised.
    """

    config = config or ExtractConfig()
    path = _search_path(config)
    binaries = {
        "pdftk": config.pdftk_bin,
        "pdftotext": config.pdftotext_bin,
        "pdffonts": config.pdffonts_bin,
        "pdfinfo": config.pdfinfo_bin,
        "gm": config.gm_bin,
        "tesseract": config.tesseract_bin,
        "soffice": config.soffice_bin,
    }

    found = {name: shutil.which(binary, path=path) is not None for name, binary in binaries.items()}
    if warn:
        for name, present in found.items():
            if not present:
                logger.warning("Dependency not found", dependency=name, binary=binaries[name])

    return Dependencies(**found)
