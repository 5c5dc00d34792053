import json
import os
from pathlib import Path
from typing import Any


def tmp_sibling(path: Path) -> Path:
    return path.with_name(f"{path.name}.tmp")


def write_json_atomic(path: Path, payload: Any) -> None:
    """Replace ``path`` with ``payload`` so readers see old or new content, never a mix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = tmp_sibling(path)
    try:
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def read_json(path: Path) -> Any | None:
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))
