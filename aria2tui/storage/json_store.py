"""
Small helpers for reading and writing the JSON files the application keeps in the
user's home directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


def read_json(file_path: Path) -> Any | None:
    """
    Reads a JSON document. Returns None if the file is missing, unreadable or not
    valid JSON; callers treat that the same as an empty store.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.debug(f"Could not read '{file_path}': {e}")
        return None


def write_json(file_path: Path, data: Any) -> None:
    """
    Writes `data` pretty-printed with a trailing newline.

    Raises:
        OSError: If the file or its parent directory cannot be written.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
