from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Mapping, Sequence

import structlog

from .contracts import ExtractConfig

logger = structlog.get_logger()


class ExtractionFailed(RuntimeError):
    """
    An external engine exited unsuccessfully.

    `output` is the engine's combined stdout/stderr, verbatim. The cause
    (encrypted PDF, missing binary, malformed input) is not classified.
    """

    def __init__(
        self,
        output: str,
        *,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
        document: str | Path | None = None,
    ) -> None:
        self.output = output
        self.command = list(command) if command is not None else None
        self.returncode = returncode
        self.document = str(document) if document is not None else None
        message = output if document is None else f"{document}: {output}"
        super().__init__(message)


class ProcessRunner:
    """
    Single chokepoint for every external engine invocation.

    Documents are appended to the command as separate argv entries (no shell),
    the configured search path and engine environment are applied, and a
    non-zero exit becomes ExtractionFailed carrying the raw output.
    """

    def __init__(self, config: ExtractConfig | None = None) -> None:
        self.config = config or ExtractConfig()

    def _environment(self, env: Mapping[str, str] | None) -> dict[str, str]:
        merged = dict(os.environ)
        if self.config.search_path:
            dirs = [str(p) for p in self.config.search_path]
            merged["PATH"] = os.pathsep.join([*dirs, merged.get("PATH", "")])
        merged.update(self.config.extra_env)
        if env:
            merged.update(env)
        return merged

    def run(
        self,
        command: Sequence[str],
        documents: Sequence[str | Path] = (),
        *,
        capture: bool = False,
        env: Mapping[str, str] | None = None,
        cwd: str | Path | None = None,
    ) -> str | bool | None:
        """
        Run `command` followed by `documents` and wait for it.

        Returns True on success, or, when `capture` is set, the output with
        trailing whitespace stripped (None if there was none).
        """

        argv = [str(c) for c in command] + [str(d) for d in documents]
        logger.debug("Running extraction engine", argv=argv, cwd=str(cwd) if cwd else None)
        started = time.monotonic()

        try:
            proc = subprocess.run(
                argv,
                check=False,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                env=self._environment(env),
                cwd=cwd,
                timeout=self.config.timeout_s,
            )
        except FileNotFoundError as e:
            logger.warning("Extraction engine not found", executable=argv[0])
            raise ExtractionFailed(f"{argv[0]}: command not found", command=argv) from e
        except subprocess.TimeoutExpired as e:
            logger.warning("Extraction engine timed out", executable=argv[0], timeout_s=self.config.timeout_s)
            partial = e.output.decode(errors="replace") if isinstance(e.output, bytes) else (e.output or "")
            raise ExtractionFailed(
                partial + f"\n{argv[0]}: timed out after {self.config.timeout_s}s", command=argv
            ) from e

        result = (proc.stdout or "").rstrip()
        duration_s = round(time.monotonic() - started, 3)

        if proc.returncode != 0:
            logger.warning(
                "Extraction engine failed",
                executable=argv[0],
                returncode=proc.returncode,
                duration_s=duration_s,
            )
            raise ExtractionFailed(result, command=argv, returncode=proc.returncode)

        logger.debug("Extraction engine finished", executable=argv[0], duration_s=duration_s)
        if capture:
            return result or None
        return True
