"""
Partition resizing.

Only F2FS can be grown in place. The current filesystem size is taken from
its superblock, and growth of a block group or less is ignored.
"""

from __future__ import annotations

from collections.abc import Callable

from fsmgr.core.constants import (
    EXIT_DEVICE_ERROR,
    EXIT_INVALID_ARGUMENT,
    EXIT_SUCCESS,
    RESIZE_MARGIN_BYTES,
)
from fsmgr.core.errors import DeviceError, UnsupportedFilesystemError
from fsmgr.core.logging import OperationLogger, get_logger
from fsmgr.core.models import FileSystemType, PartitionSpec
from fsmgr.fs.args import ArgumentBuilder
from fsmgr.fs.format import SizeProber, target_size
from fsmgr.fs.superblock import get_f2fs_byte_size
from fsmgr.platform.base import ProcessRunner
from fsmgr.platform.blockdev import probe_size
from fsmgr.platform.process import SubprocessRunner

logger = get_logger(__name__)


def needs_resize(current_size: int, target: int) -> bool:
    """Whether growing from ``current_size`` to ``target`` is worth a resize."""
    if current_size <= 0:
        return False
    return target > current_size + RESIZE_MARGIN_BYTES


def do_resize(
    spec: PartitionSpec,
    has_crypt_footer: bool,
    *,
    runner: ProcessRunner | None = None,
    builder: ArgumentBuilder | None = None,
    prober: SizeProber = probe_size,
    reader: Callable[[str], int] = get_f2fs_byte_size,
) -> int:
    """
    Grow the filesystem on ``spec.block_device`` to fill the partition.

    Returns 0 when resized or when no resize is needed, -EINVAL for types
    other than f2fs, -1 if the device size cannot be read, and otherwise
    the exit code of resize.f2fs.
    """
    runner = runner or SubprocessRunner()
    builder = builder or ArgumentBuilder()

    logger.info("Resize requested", device=spec.block_device, length=spec.length)

    try:
        filesystem = spec.filesystem
    except UnsupportedFilesystemError as e:
        logger.error(str(e))
        return EXIT_INVALID_ARGUMENT

    if filesystem is not FileSystemType.F2FS:
        logger.error("Resize is not supported", fs_type=filesystem.value)
        return EXIT_INVALID_ARGUMENT

    with OperationLogger("resize", logger, device=spec.block_device) as op:
        try:
            target = target_size(spec, has_crypt_footer, prober)
        except DeviceError as e:
            logger.error("Cannot determine device size", error=str(e))
            op.update(exit_code=EXIT_DEVICE_ERROR)
            return EXIT_DEVICE_ERROR
        except ValueError as e:
            logger.error("Invalid filesystem size", error=str(e))
            op.update(exit_code=EXIT_INVALID_ARGUMENT)
            return EXIT_INVALID_ARGUMENT

        current = reader(spec.block_device)
        op.update(target_bytes=target, current_bytes=current)

        if not needs_resize(current, target):
            logger.info("No need to resize", target_bytes=target, current_bytes=current)
            op.update(exit_code=EXIT_SUCCESS, resized=False)
            return EXIT_SUCCESS

        rc = runner.execute(builder.f2fs_resize(spec.block_device, target))
        op.update(exit_code=rc, resized=rc == 0)
        return rc
