"""
Helper utilities for Image Relay.

Filesystem functions shared by the watcher, uploader and entry point.
"""

import mimetypes
import time
from pathlib import Path
from typing import Iterable, List, Optional


def is_hidden(path: Path) -> bool:
    """Check if path is hidden (starts with dot)."""
    return path.name.startswith('.')


def should_exclude_path(
    path: Path,
    ignored_suffixes: Optional[List[str]] = None,
    skip_hidden: bool = False,
) -> bool:
    """
    Check if path is a transient (or, optionally, hidden) file that must not be uploaded.

    Args:
        path: Path to check
        ignored_suffixes: Lowercase suffixes (with dot) to skip
        skip_hidden: Also skip dot files

    Returns:
        True if should exclude, False otherwise
    """
    if ignored_suffixes is None:
        ignored_suffixes = ['.tmp', '.swp', '.part', '.partial', '.crdownload']

    if skip_hidden and is_hidden(path):
        return True

    return path.suffix.lower() in ignored_suffixes


def guess_content_type(path: Path) -> str:
    """Guess MIME type from the file extension."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or 'application/octet-stream'


def ensure_directories(paths: Iterable[Path]) -> List[Path]:
    """
    Create each directory (and parents) if it does not exist yet.

    Raises:
        OSError: If a directory cannot be created
    """
    created = []
    for path in paths:
        path = Path(path)
        if not path.is_dir():
            path.mkdir(parents=True, exist_ok=True)
            created.append(path)
    return created


def wait_until_stable(path: Path, grace_period: float, poll_interval: float = 0.25) -> bool:
    """
    Wait until a freshly created file stops growing.

    Polls the file size until two consecutive readings agree or the grace
    period runs out, whichever comes first.

    Args:
        path: File that is possibly still being written
        grace_period: Maximum seconds to wait; 0 returns immediately
        poll_interval: Seconds between size readings

    Returns:
        True if the size settled, False if the grace period ran out

    Raises:
        OSError: If the file disappears while waiting
    """
    if grace_period <= 0:
        return True

    deadline = time.monotonic() + grace_period
    last_size = path.stat().st_size

    while time.monotonic() < deadline:
        time.sleep(min(poll_interval, max(deadline - time.monotonic(), 0)))
        size = path.stat().st_size
        if size == last_size:
            return True
        last_size = size

    return False


def format_bytes(bytes_count: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_count < 1024.0:
            return f"{bytes_count:.1f} {unit}"
        bytes_count /= 1024.0
    return f"{bytes_count:.1f} PB"
