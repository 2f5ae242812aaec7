"""
fsmgr data models.

Defines the partition descriptor, the on-disk F2FS superblock header and
the tool invocations handed to the process runner.
"""

from __future__ import annotations

import shlex
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from fsmgr.core.constants import F2FS_BLKSIZE, F2FS_SUPER_MAGIC, USERDATA_MOUNT_POINT
from fsmgr.core.errors import UnsupportedFilesystemError


class FileSystemType(Enum):
    """File systems fsmgr knows how to create."""

    EXT4 = "ext4"
    F2FS = "f2fs"
    VFAT = "vfat"

    @classmethod
    def parse(cls, value: str) -> FileSystemType:
        """Resolve a type string, raising for anything unsupported."""
        for fs in cls:
            if fs.value == value:
                return fs
        raise UnsupportedFilesystemError(value)


class FsMgrFlag(Enum):
    """fs_mgr feature flags that influence formatting."""

    COMPRESS = "fscompress"
    EXT_META_CSUM = "ext_meta_csum"

    @classmethod
    def from_string(cls, value: str) -> FsMgrFlag | None:
        """Map an fstab flag name to a flag, or None if it is not one of ours."""
        value_lower = value.lower().strip()
        aliases = {
            "fscompress": cls.COMPRESS,
            "compress": cls.COMPRESS,
            "ext_meta_csum": cls.EXT_META_CSUM,
        }
        return aliases.get(value_lower)


@dataclass(frozen=True)
class PartitionSpec:
    """A partition to format or resize, as described by an fstab entry."""

    block_device: str
    mount_point: str
    fs_type: str
    length: int = 0  # 0 means use the whole device
    flags: frozenset[FsMgrFlag] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError(f"length must not be negative: {self.length}")
        if not isinstance(self.flags, frozenset):
            object.__setattr__(self, "flags", frozenset(self.flags))

    @property
    def filesystem(self) -> FileSystemType:
        return FileSystemType.parse(self.fs_type)

    @property
    def compress(self) -> bool:
        return FsMgrFlag.COMPRESS in self.flags

    @property
    def ext_meta_csum(self) -> bool:
        return FsMgrFlag.EXT_META_CSUM in self.flags

    @property
    def is_userdata(self) -> bool:
        return self.mount_point == USERDATA_MOUNT_POINT

    def to_dict(self) -> dict[str, Any]:
        return {
            "block_device": self.block_device,
            "mount_point": self.mount_point,
            "fs_type": self.fs_type,
            "length": self.length,
            "flags": sorted(f.value for f in self.flags),
        }


@dataclass(frozen=True)
class FormatConfig:
    """Per-call formatting features read from the property store."""

    needs_projid: bool = False
    needs_casefold: bool = False


@dataclass(frozen=True)
class SuperblockHeader:
    """Leading fields of the F2FS superblock."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IHH6IIQ")
    SIZE: ClassVar[int] = FORMAT.size

    magic: int
    major_version: int
    minor_version: int
    reserved: tuple[int, ...]
    checksum_offset: int
    block_count: int

    @classmethod
    def decode(cls, data: bytes) -> SuperblockHeader:
        """Decode the header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"superblock header needs {cls.SIZE} bytes, got {len(data)}")

        fields = cls.FORMAT.unpack_from(data)
        return cls(
            magic=fields[0],
            major_version=fields[1],
            minor_version=fields[2],
            reserved=tuple(fields[3:9]),
            checksum_offset=fields[9],
            block_count=fields[10],
        )

    @property
    def is_f2fs(self) -> bool:
        return self.magic == F2FS_SUPER_MAGIC

    @property
    def byte_size(self) -> int:
        return self.block_count * F2FS_BLKSIZE

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "magic": f"0x{self.magic:08X}",
            "version": self.version,
            "checksum_offset": self.checksum_offset,
            "block_count": self.block_count,
            "byte_size": self.byte_size,
        }


@dataclass(frozen=True)
class ToolInvocation:
    """A single external tool run."""

    executable: str
    arguments: tuple[str, ...] = ()

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]

    @property
    def name(self) -> str:
        return self.executable.rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return shlex.join(self.argv)
