"""
fsmgr Platform Layer.

Process execution and raw block device access used by the dispatchers.
"""

from fsmgr.platform.base import LogTarget, ProcessRunner
from fsmgr.platform.blockdev import probe_size
from fsmgr.platform.process import DryRunRunner, SubprocessRunner, is_executable

__all__ = [
    "LogTarget",
    "ProcessRunner",
    "probe_size",
    "DryRunRunner",
    "SubprocessRunner",
    "is_executable",
]
