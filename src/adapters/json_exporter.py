"""JSON rendering of response payloads.

- UTF-8 without ASCII escaping: titles and chapter text are mostly CJK.
- Same rendering for stdout and for `--output` files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def render_payload_json(payload: dict[str, Any], *, indent: int | None = 2) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=indent) + "\n"


def export_payload_json(*, payload: dict[str, Any], output_path: Path) -> Path:
    """Write `payload` to `output_path` as UTF-8 JSON."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_payload_json(payload), encoding="utf-8")
    return output_path
