from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping


def serialize_metadata(info: Mapping[str, Any]) -> str:
    """
    Stable JSON serialization of extracted metadata.
    """

    payload = {str(k): v for k, v in info.items()}
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, indent=2) + "\n"


def write_metadata_json(*, info: Mapping[str, Any], out_file: Path) -> None:
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(serialize_metadata(info), encoding="utf-8")
