from __future__ import annotations

from pathlib import Path
from typing import Union

import structlog

from .errors import Outcome
from .signature import BLOCK_SIZE, find_signature

log = structlog.stdlib.get_logger()

PNG_MARKER = b"PNG"
COVER_WINDOW = 512 * 1024
COVER_EXT = ".png"


def cover_name(title_id: str) -> str:
    return f"{title_id}{COVER_EXT}"


def extract_cover(pkg_path: Union[str, Path], title_id: str, image_dir: Union[str, Path],
                  block_size: int = BLOCK_SIZE) -> Outcome:
    """Copy the first embedded PNG (plus whatever follows it) to the cover store.

    Only the "PNG" marker is located. The window is a fixed 512 KiB starting
    one byte before it (the 0x89 lead byte) and is written as-is, so it
    usually carries trailing package bytes after the image.
    """
    target = Path(image_dir) / cover_name(title_id)
    try:
        with open(pkg_path, "rb") as fh:
            found = find_signature(fh, PNG_MARKER, block_size)
            if found is None:
                return Outcome.not_found("no PNG marker")
            fh.seek(max(found - 1, 0))
            window = fh.read(COVER_WINDOW)
        target.write_bytes(window)
    except OSError as e:
        return Outcome.io_error(e)
    log.debug("Cover extracted", path=str(pkg_path), cover=str(target), size=len(window))
    return Outcome.found(target)
