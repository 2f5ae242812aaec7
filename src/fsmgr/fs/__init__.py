"""
fsmgr Filesystem Operations.

Superblock detection, tool argument construction and the format and
resize entry points.
"""

from fsmgr.fs.args import ArgumentBuilder, usable_size
from fsmgr.fs.format import derive_format_config, do_format
from fsmgr.fs.resize import do_resize
from fsmgr.fs.superblock import get_f2fs_byte_size, read_signature

__all__ = [
    "ArgumentBuilder",
    "usable_size",
    "derive_format_config",
    "do_format",
    "do_resize",
    "get_f2fs_byte_size",
    "read_signature",
]
