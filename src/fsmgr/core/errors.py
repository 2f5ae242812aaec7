"""
fsmgr exception hierarchy.

Leaf operations raise these; the format and resize dispatchers turn them
into exit statuses.
"""

from __future__ import annotations


class FsMgrError(Exception):
    """Base class for all fsmgr errors."""


class DeviceError(FsMgrError):
    """A block device could not be accessed."""

    def __init__(self, device_path: str, message: str) -> None:
        super().__init__(f"{device_path}: {message}")
        self.device_path = device_path


class DeviceOpenError(DeviceError):
    """The device node could not be opened."""


class DeviceQueryError(DeviceError):
    """The device size could not be queried."""


class UnsupportedFilesystemError(FsMgrError, ValueError):
    """The filesystem type is not one fsmgr can format or resize."""

    def __init__(self, fs_type: str) -> None:
        super().__init__(f"File system type '{fs_type}' is not supported")
        self.fs_type = fs_type


class FstabParseError(FsMgrError, ValueError):
    """An fstab line could not be parsed."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
