"""
Block device size probing.
"""

from __future__ import annotations

import fcntl
import os
import stat
import struct

from fsmgr.core.errors import DeviceOpenError, DeviceQueryError
from fsmgr.core.logging import get_logger

logger = get_logger(__name__)

# _IOR(0x12, 114, size_t) from <linux/fs.h>
BLKGETSIZE64 = 0x80081272


def _ioctl_size(fd: int, path: str) -> int:
    buf = bytearray(8)
    try:
        fcntl.ioctl(fd, BLKGETSIZE64, buf, True)
    except OSError as e:
        raise DeviceQueryError(path, f"cannot get block device size: {e.strerror}") from e
    return struct.unpack("=Q", buf)[0]


def probe_size(path: str) -> int:
    """Return the size of a block device (or image file) in bytes."""
    try:
        fd = os.open(path, os.O_RDONLY | os.O_CLOEXEC)
    except OSError as e:
        raise DeviceOpenError(path, f"cannot open block device: {e.strerror}") from e

    try:
        mode = os.fstat(fd).st_mode
        if stat.S_ISBLK(mode):
            size = _ioctl_size(fd, path)
        elif stat.S_ISREG(mode):
            size = os.fstat(fd).st_size
        else:
            raise DeviceQueryError(path, "not a block device or image file")
    finally:
        os.close(fd)

    logger.debug("Probed device size", device=path, size_bytes=size)
    return size
