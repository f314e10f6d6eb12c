import re
import time
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional, Tuple

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

def now_ms() -> int:
    """
    Current time in milliseconds since the epoch.
    """
    return int(time.time() * 1000)

def sanitize_filename(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to a safe basename.

    Directory components are dropped and every character outside
    [A-Za-z0-9._-] is replaced with an underscore.
    """
    name = PureWindowsPath(PurePosixPath(filename or "").name).name
    name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
    return name or "upload"

def build_stored_name(filename: Optional[str], timestamp: int) -> str:
    """
    Build the `<timestamp>-<name>` storage name for an upload.
    """
    return f"{timestamp}-{sanitize_filename(filename)}"

def parse_stored_name(stored_name: str) -> Tuple[Optional[int], str]:
    """
    Split a `<timestamp>-<name>` storage name.

    Returns:
        Tuple of (timestamp or None when the name carries no prefix, name)
    """
    prefix, sep, rest = stored_name.partition("-")
    if sep and prefix.isdigit():
        return int(prefix), rest
    return None, stored_name

def is_image_content_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")

def ensure_directory_exists(directory_path: Path) -> None:
    """
    Ensure that a directory exists, creating it if necessary.
    """
    directory_path.mkdir(parents=True, exist_ok=True)
