import json
import os
import tempfile
from pathlib import Path
from typing import Any

from config.config import SETTINGS_JSON_INDENT


def ensure_dir(path: str | Path) -> Path:
    """Ensure the directory exists and return the Path."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_json(path: str | Path) -> Any:
    """Load a JSON document from disk."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json_atomic(path: str | Path, payload: Any, indent: int = SETTINGS_JSON_INDENT) -> None:
    """
    Write ``payload`` as JSON, replacing ``path`` in one step.

    The document is written to a temporary file in the same directory and
    then renamed over the target, so readers see either the old or the new
    content.

    Args:
        path: Destination file
        payload: JSON-serializable value
        indent: Indentation used for the pretty-printed output
    """
    target = Path(path)
    ensure_dir(target.parent)

    fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=indent)
        os.replace(temp_name, target)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
