# src/lazycal/core/json_files.py

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path


def write_json_atomic(path: str | Path, payload: object, *, mode: int | None = None) -> Path:
    """
    Write payload as JSON next to path, then swap it into place.

    Readers see either the old file or the new one. The temp file is removed
    if anything fails before the swap. mode, if given, is applied best-effort.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise

    if mode is not None:
        with contextlib.suppress(OSError):
            os.chmod(path, mode)
    return path
