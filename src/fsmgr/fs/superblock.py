"""
F2FS superblock detection.

F2FS keeps two copies of its superblock, one per leading block. The header
is looked for at 1024 bytes into the device and, failing that, one block
further in.
"""

from __future__ import annotations

import os

from fsmgr.core.constants import F2FS_BLKSIZE, F2FS_SUPER_OFFSET
from fsmgr.core.logging import get_logger
from fsmgr.core.models import SuperblockHeader

logger = get_logger(__name__)

SUPERBLOCK_OFFSETS = (F2FS_SUPER_OFFSET, F2FS_BLKSIZE + F2FS_SUPER_OFFSET)


def _read_header(fd: int, offset: int) -> SuperblockHeader | None:
    data = os.pread(fd, SuperblockHeader.SIZE, offset)
    if len(data) != SuperblockHeader.SIZE:
        logger.debug("Short superblock read", offset=offset, read=len(data))
        return None
    return SuperblockHeader.decode(data)


def read_signature(path: str) -> SuperblockHeader | None:
    """
    Find an F2FS superblock header on ``path``.

    Returns None when the device cannot be read or neither copy carries the
    F2FS magic.
    """
    try:
        fd = os.open(path, os.O_RDONLY | os.O_CLOEXEC)
    except OSError as e:
        logger.debug("Cannot open device for superblock read", device=path, error=e.strerror)
        return None

    try:
        for offset in SUPERBLOCK_OFFSETS:
            header = _read_header(fd, offset)
            if header is None:
                return None
            if header.is_f2fs:
                logger.debug("Found f2fs superblock", device=path, offset=offset)
                return header
    except OSError as e:
        logger.debug("Superblock read failed", device=path, error=e.strerror)
        return None
    finally:
        os.close(fd)

    return None


def get_f2fs_byte_size(path: str) -> int:
    """Size of the F2FS filesystem on ``path`` in bytes, or 0 if there is none."""
    header = read_signature(path)
    if header is None:
        return 0
    return header.byte_size
