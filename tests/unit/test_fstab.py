"""
Tests for fsmgr.core.fstab module.
"""

from pathlib import Path

import pytest

from fsmgr.core.errors import FstabParseError
from fsmgr.core.fstab import find_entry, load_fstab, parse_fstab, parse_fstab_line
from fsmgr.core.models import FsMgrFlag

FSTAB = """
# Android fstab file.
#<src>                        <mnt_point> <type> <mnt_flags>          <fs_mgr_flags>
/dev/block/by-name/system     /system     ext4   ro,barrier=1         wait,first_stage_mount
/dev/block/by-name/userdata   /data       f2fs   noatime,nosuid       wait,check,formattable,fscompress,length=-16384
/dev/block/by-name/metadata   /metadata   ext4   noatime,nosuid       wait,formattable,ext_meta_csum,length=0x1000000
/dev/block/by-name/cache      /cache      f2fs   noatime              wait,length=1048576
/dev/block/mmcblk1p1          /sdcard     vfat   defaults
"""


class TestParseFstabLine:
    """Tests for single line parsing."""

    def test_basic(self) -> None:
        spec = parse_fstab_line("/dev/block/sda1 /data f2fs noatime wait,fscompress")
        assert spec.block_device == "/dev/block/sda1"
        assert spec.mount_point == "/data"
        assert spec.fs_type == "f2fs"
        assert spec.length == 0
        assert spec.flags == frozenset({FsMgrFlag.COMPRESS})

    def test_length(self) -> None:
        spec = parse_fstab_line("/dev/a /cache ext4 defaults wait,length=0x4000")
        assert spec.length == 0x4000

    def test_too_few_fields(self) -> None:
        with pytest.raises(FstabParseError):
            parse_fstab_line("/dev/a /data f2fs defaults")

    def test_invalid_length(self) -> None:
        with pytest.raises(FstabParseError, match="invalid length"):
            parse_fstab_line("/dev/a /data f2fs defaults length=big")

    def test_negative_length(self) -> None:
        with pytest.raises(FstabParseError, match="negative"):
            parse_fstab_line("/dev/a /data f2fs defaults length=-16384")


class TestParseFstab:
    """Tests for whole-file parsing."""

    def test_skips_comments_and_bad_lines(self) -> None:
        entries = parse_fstab(FSTAB)
        mounts = [e.mount_point for e in entries]
        # /data has a negative length and /sdcard is missing a field
        assert mounts == ["/system", "/metadata", "/cache"]

    def test_flags_and_lengths(self) -> None:
        entries = parse_fstab(FSTAB)
        metadata = find_entry(entries, "/metadata")
        assert metadata is not None
        assert metadata.ext_meta_csum
        assert metadata.length == 0x1000000

        cache = find_entry(entries, "/cache")
        assert cache is not None
        assert cache.length == 1048576

    def test_find_entry_missing(self) -> None:
        assert find_entry(parse_fstab(FSTAB), "/vendor") is None

    def test_load_fstab(self, temp_dir: Path) -> None:
        path = temp_dir / "fstab.test"
        path.write_text("/dev/a /data f2fs noatime wait,fscompress\n")
        entries = load_fstab(path)
        assert len(entries) == 1
        assert entries[0].compress
