"""
Partition formatting.

Picks the formatter for the partition's filesystem type, works out the
size and feature arguments and runs the tool.
"""

from __future__ import annotations

from collections.abc import Callable

from fsmgr.core.constants import (
    EXIT_DEVICE_ERROR,
    EXIT_INVALID_ARGUMENT,
    EXIT_SUCCESS,
    PROP_CASEFOLD_ENABLED,
    PROP_PROJID_ENABLED,
)
from fsmgr.core.errors import DeviceError, UnsupportedFilesystemError
from fsmgr.core.logging import OperationLogger, get_logger
from fsmgr.core.models import FileSystemType, FormatConfig, PartitionSpec
from fsmgr.core.properties import PropertyStore
from fsmgr.fs.args import ArgumentBuilder, usable_size
from fsmgr.platform.base import ProcessRunner
from fsmgr.platform.blockdev import probe_size
from fsmgr.platform.process import SubprocessRunner

logger = get_logger(__name__)

SizeProber = Callable[[str], int]


def derive_format_config(spec: PartitionSpec, properties: PropertyStore) -> FormatConfig:
    """Read the per-format features. Only userdata consults the properties."""
    if not spec.is_userdata:
        return FormatConfig()

    return FormatConfig(
        needs_projid=properties.get_bool_property(PROP_PROJID_ENABLED, False),
        needs_casefold=properties.get_bool_property(PROP_CASEFOLD_ENABLED, False),
    )


def target_size(spec: PartitionSpec, has_crypt_footer: bool, prober: SizeProber) -> int:
    """
    Bytes the filesystem should span.

    A declared length is trusted as is; otherwise the device is probed.
    Raises DeviceError if probing fails and ValueError if the crypt footer
    does not fit.
    """
    size = spec.length or prober(spec.block_device)
    return usable_size(size, has_crypt_footer)


def _format_ext4(
    spec: PartitionSpec,
    size: int,
    config: FormatConfig,
    runner: ProcessRunner,
    builder: ArgumentBuilder,
) -> int:
    invocation = builder.ext4_format(
        spec.block_device,
        size,
        needs_projid=config.needs_projid,
        needs_metadata_csum=spec.ext_meta_csum,
    )
    rc = runner.execute(invocation)
    if rc:
        logger.error("mke2fs failed", returncode=rc)
        return rc

    rc = runner.execute(builder.ext4_populate(spec.block_device, spec.mount_point))
    if rc:
        logger.error("e2fsdroid failed", returncode=rc)
    return rc


def _format_f2fs(
    spec: PartitionSpec,
    size: int,
    config: FormatConfig,
    runner: ProcessRunner,
    builder: ArgumentBuilder,
) -> int:
    invocation = builder.f2fs_format(
        spec.block_device,
        size,
        needs_projid=config.needs_projid,
        needs_casefold=config.needs_casefold,
        compress=spec.compress,
    )
    return runner.execute(invocation)


def _format_vfat(spec: PartitionSpec, runner: ProcessRunner, builder: ArgumentBuilder) -> int:
    if not builder.vfat_ready():
        logger.warning("Formatter not executable", tool=builder.tools.newfs_msdos)
    return runner.execute(builder.vfat_format(spec.block_device))


def do_format(
    spec: PartitionSpec,
    has_crypt_footer: bool,
    *,
    properties: PropertyStore | None = None,
    runner: ProcessRunner | None = None,
    builder: ArgumentBuilder | None = None,
    prober: SizeProber = probe_size,
) -> int:
    """
    Format ``spec.block_device`` with ``spec.fs_type``.

    Returns 0 on success, -EINVAL for an unsupported type or impossible
    size, -1 if the device size cannot be read, and otherwise the failing
    tool's exit code.
    """
    runner = runner or SubprocessRunner()
    builder = builder or ArgumentBuilder()

    logger.info("Format requested", device=spec.block_device, fs_type=spec.fs_type)

    try:
        filesystem = spec.filesystem
    except UnsupportedFilesystemError as e:
        logger.error(str(e))
        return EXIT_INVALID_ARGUMENT

    config = derive_format_config(spec, properties or PropertyStore())

    with OperationLogger(
        "format",
        logger,
        device=spec.block_device,
        fs_type=filesystem.value,
        needs_projid=config.needs_projid,
        needs_casefold=config.needs_casefold,
    ) as op:
        if filesystem is FileSystemType.VFAT:
            rc = _format_vfat(spec, runner, builder)
            op.update(exit_code=rc)
            return rc

        try:
            size = target_size(spec, has_crypt_footer, prober)
        except DeviceError as e:
            logger.error("Cannot determine device size", error=str(e))
            op.update(exit_code=EXIT_DEVICE_ERROR)
            return EXIT_DEVICE_ERROR
        except ValueError as e:
            logger.error("Invalid filesystem size", error=str(e))
            op.update(exit_code=EXIT_INVALID_ARGUMENT)
            return EXIT_INVALID_ARGUMENT

        op.update(size_bytes=size)

        if filesystem is FileSystemType.EXT4:
            rc = _format_ext4(spec, size, config, runner, builder)
        else:
            rc = _format_f2fs(spec, size, config, runner, builder)

        op.update(exit_code=rc)
        return rc if rc else EXIT_SUCCESS
