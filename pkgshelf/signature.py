from __future__ import annotations

from typing import BinaryIO, Optional

BLOCK_SIZE = 1024 * 1024


def find_signature(fh: BinaryIO, pattern: bytes, block_size: int = BLOCK_SIZE) -> Optional[int]:
    """Return the absolute offset of the first ``pattern`` in ``fh``, or None.

    Blocks are read back to back without overlap, so a match that straddles
    a block boundary is not reported.
    """
    if not pattern:
        raise ValueError("empty signature")
    offset = 0
    fh.seek(0)
    while True:
        block = fh.read(block_size)
        if not block:
            return None
        idx = block.find(pattern)
        if idx != -1:
            return offset + idx
        offset += len(block)
