"""Atomic file writes for snapshot and diff persistence.

Content is written to a temp file in the target directory, flushed to
disk, and only then given its final name, so readers never observe a
partially written file.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from core.constants import TEMP_FILE_SUFFIX
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def write_text_atomic(target_path: Path, content: str, exclusive: bool) -> None:
    """Write text to a path through a temp file.

    Args:
        target_path: Final file path.
        content: UTF-8 text to write.
        exclusive: Fail instead of replacing an existing file.

    Raises:
        FileExistsError: If ``exclusive`` and the target already exists.
        OSError: If the temp file cannot be written or renamed.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(
        dir=target_path.parent,
        prefix=f".{target_path.name}.",
        suffix=TEMP_FILE_SUFFIX,
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        if exclusive:
            _link_exclusive(temp_path, target_path)
        else:
            os.replace(temp_path, target_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def _link_exclusive(temp_path: Path, target_path: Path) -> None:
    """Give the temp file its final name without replacing anything.

    A hard link is atomic and fails when the name is taken. Filesystems
    without hard links fall back to an existence check plus rename.
    """
    try:
        os.link(temp_path, target_path)
        return
    except FileExistsError:
        raise
    except OSError as error:
        _LOGGER.debug("hard_link_unavailable", target=str(target_path), error=str(error))
    if target_path.exists():
        raise FileExistsError(str(target_path))
    os.replace(temp_path, target_path)
