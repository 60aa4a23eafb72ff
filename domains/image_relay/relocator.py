"""Archive processed originals into the destination directory."""

import os
import shutil
from pathlib import Path

from loguru import logger

from app.utils.exceptions import RelocationError


def _copy_exclusive(src: Path, target: Path):
    """Copy ``src`` to a ``target`` that must not exist yet."""
    with src.open("rb") as fin:
        with target.open("xb") as fout:
            try:
                shutil.copyfileobj(fin, fout)
            except OSError:
                target.unlink(missing_ok=True)
                raise
    shutil.copystat(src, target)


def relocate(src: Path, destination_dir: Path) -> Path:
    """
    Move ``src`` into ``destination_dir`` keeping its base name.

    The archived name is claimed atomically: a hard link on the same device,
    an exclusive create plus copy otherwise. An archived file of the same
    name is never overwritten.

    Raises:
        RelocationError: If the target exists or the move fails
    """
    src = Path(src)
    target = Path(destination_dir) / src.name

    try:
        try:
            os.link(src, target)
        except FileExistsError:
            raise
        except OSError:
            # Cross-device or no hard link support
            _copy_exclusive(src, target)
    except FileExistsError as e:
        raise RelocationError(f"{target} already exists, leaving {src} in place", path=src) from e
    except OSError as e:
        raise RelocationError(f"Cannot move {src} to {destination_dir}: {e}", path=src) from e

    try:
        src.unlink()
    except OSError as e:
        raise RelocationError(f"Archived {target} but cannot remove {src}: {e}", path=src) from e

    logger.info(f"File {src.name} moved to {destination_dir}")
    return target
