"""
Constants shared with the external tools and the on-disk formats.
"""

from __future__ import annotations

import errno

# F2FS on-disk layout
F2FS_BLKSIZE = 4096
F2FS_SUPER_OFFSET = 1024
F2FS_SUPER_MAGIC = 0xF2F52010

# ext4 is always created with 4K blocks
EXT4_BLOCK_SIZE = 4096
EXT4_PROJID_INODE_SIZE = 512

# resize.f2fs takes its target in 512-byte sectors
SECTOR_SIZE = 512

# Bytes reserved at the end of the device for the encryption footer
CRYPT_FOOTER_OFFSET = 0x4000

# Skip resizing unless the device grew by more than one block group
RESIZE_MARGIN_BYTES = F2FS_BLKSIZE * 1024

USERDATA_MOUNT_POINT = "/data"

PROP_CASEFOLD_ENABLED = "external_storage.casefold.enabled"
PROP_PROJID_ENABLED = "external_storage.projid.enabled"

# Exit statuses
EXIT_SUCCESS = 0
EXIT_DEVICE_ERROR = -1
EXIT_INVALID_ARGUMENT = -errno.EINVAL
