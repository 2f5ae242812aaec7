"""
fsmgr Core - Shared models, configuration and logging.

Contains the data model, configuration, property lookup and fstab
parsing used by the format and resize dispatchers.
"""

from fsmgr.core.config import FsMgrConfig, ToolsConfig
from fsmgr.core.errors import (
    DeviceError,
    DeviceOpenError,
    DeviceQueryError,
    FsMgrError,
    FstabParseError,
    UnsupportedFilesystemError,
)
from fsmgr.core.logging import get_logger, setup_logging
from fsmgr.core.properties import PropertyStore

__all__ = [
    "FsMgrConfig",
    "ToolsConfig",
    "DeviceError",
    "DeviceOpenError",
    "DeviceQueryError",
    "FsMgrError",
    "FstabParseError",
    "UnsupportedFilesystemError",
    "get_logger",
    "setup_logging",
    "PropertyStore",
]
