"""
fsmgr - Partition filesystem format and resize dispatcher.

Decides how to create or grow the filesystem on a partition and hands the
actual work to mke2fs, make_f2fs, resize.f2fs and newfs_msdos.
"""

__version__ = "1.0.0"

from fsmgr.core.config import FsMgrConfig
from fsmgr.core.models import FileSystemType, PartitionSpec
from fsmgr.fs.format import do_format
from fsmgr.fs.resize import do_resize

__all__ = [
    "FsMgrConfig",
    "FileSystemType",
    "PartitionSpec",
    "do_format",
    "do_resize",
    "__version__",
]
