"""
Utilities for handling file paths and URL parsing.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlsplit

log = logging.getLogger(__name__)

# Files aria2c accepts as an input source
SUPPORTED_EXTENSIONS = (".torrent", ".metalink", ".meta4", ".txt")
# A "%" that does not start a two-digit hex escape
MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def filename_from_uri(uri: str) -> str | None:
    """
    Derives a file name from the last path segment of a URL.

    Returns None when the URI is not an absolute URL, or its last segment has no
    '.' in it or cannot be percent-decoded.
    """
    try:
        parts = urlsplit(uri)
        if not parts.scheme:
            return None
        name = parts.path.split("/")[-1]
        if not name or "." not in name or MALFORMED_ESCAPE.search(name):
            return None
        return unquote(name, errors="strict")
    except (ValueError, UnicodeDecodeError):
        return None


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: Path


def list_supported_files(directory: Path) -> list[FileEntry]:
    """
    Lists files in `directory` (not its subdirectories) that aria2c can take as
    input, sorted alphabetically.
    """
    try:
        candidates = [p for p in directory.iterdir() if p.is_file()]
    except OSError as e:
        log.debug(f"Cannot list '{directory}': {e}")
        return []

    supported = [p for p in candidates if p.suffix.lower() in SUPPORTED_EXTENSIONS]
    supported.sort(key=lambda p: (p.name.casefold(), p.name))
    return [FileEntry(p.name, p.resolve()) for p in supported]
