"""
Command line construction for the filesystem tools.

Everything here is pure: it maps a device, a size and a set of features
to a ToolInvocation and never touches the device.
"""

from __future__ import annotations

from fsmgr.core.config import ToolsConfig
from fsmgr.core.constants import (
    CRYPT_FOOTER_OFFSET,
    EXT4_BLOCK_SIZE,
    EXT4_PROJID_INODE_SIZE,
    F2FS_BLKSIZE,
    SECTOR_SIZE,
)
from fsmgr.core.models import ToolInvocation
from fsmgr.platform.process import is_executable


def usable_size(size_bytes: int, has_crypt_footer: bool) -> int:
    """Bytes available to the filesystem once the crypt footer is reserved."""
    if not has_crypt_footer:
        return size_bytes
    if size_bytes < CRYPT_FOOTER_OFFSET:
        raise ValueError(
            f"size {size_bytes} is smaller than the crypt footer ({CRYPT_FOOTER_OFFSET})"
        )
    return size_bytes - CRYPT_FOOTER_OFFSET


class ArgumentBuilder:
    """Builds tool invocations for the configured tool paths."""

    def __init__(self, tools: ToolsConfig | None = None) -> None:
        self.tools = tools or ToolsConfig()

    def ext4_format(
        self,
        device: str,
        size_bytes: int,
        needs_projid: bool = False,
        needs_metadata_csum: bool = False,
    ) -> ToolInvocation:
        args = ["-t", "ext4", "-b", str(EXT4_BLOCK_SIZE)]

        # Project IDs need wider inodes. Quotas are turned on later by tune2fs.
        if needs_projid:
            args.extend(["-I", str(EXT4_PROJID_INODE_SIZE)])

        # tune2fs wants 64bit and extent alongside metadata_csum, otherwise
        # checksum coverage is reduced.
        if needs_metadata_csum:
            args.extend(["-O", "metadata_csum", "-O", "64bit", "-O", "extent"])

        args.extend([device, str(size_bytes // EXT4_BLOCK_SIZE)])
        return ToolInvocation(self.tools.mke2fs, tuple(args))

    def ext4_populate(self, device: str, mount_point: str) -> ToolInvocation:
        """e2fsdroid run that lays out the default tree for ``mount_point``."""
        return ToolInvocation(self.tools.e2fsdroid, ("-e", "-a", mount_point, device))

    def f2fs_format(
        self,
        device: str,
        size_bytes: int,
        needs_projid: bool = False,
        needs_casefold: bool = False,
        compress: bool = False,
    ) -> ToolInvocation:
        args = ["-g", "android"]
        if needs_projid:
            args.extend(["-O", "project_quota,extra_attr"])
        if needs_casefold:
            args.extend(["-O", "casefold", "-C", "utf8"])
        if compress:
            # compression depends on extra_attr
            args.extend(["-O", "compression", "-O", "extra_attr"])

        args.extend([device, str(size_bytes // F2FS_BLKSIZE)])
        return ToolInvocation(self.tools.make_f2fs, tuple(args))

    def f2fs_resize(self, device: str, size_bytes: int) -> ToolInvocation:
        return ToolInvocation(
            self.tools.resize_f2fs,
            ("-t", str(size_bytes // SECTOR_SIZE), device),
        )

    def vfat_format(self, device: str) -> ToolInvocation:
        return ToolInvocation(self.tools.newfs_msdos, ("-O", "android", device))

    def vfat_ready(self) -> bool:
        return is_executable(self.tools.newfs_msdos)
