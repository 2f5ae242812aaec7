"""
Tests for fsmgr.fs.format module.
"""

import errno
from pathlib import Path
from unittest.mock import Mock

import pytest
from structlog.testing import capture_logs

from fsmgr.core.config import ToolsConfig
from fsmgr.core.constants import CRYPT_FOOTER_OFFSET
from fsmgr.core.errors import DeviceOpenError, DeviceQueryError
from fsmgr.core.models import FormatConfig, FsMgrFlag, PartitionSpec
from fsmgr.core.properties import PropertyStore
from fsmgr.fs.args import ArgumentBuilder
from fsmgr.fs.format import derive_format_config, do_format, target_size

GIB = 1 << 30
USERDATA = "/dev/block/by-name/userdata"


def gib_prober(path: str) -> int:
    return GIB


class TestDeriveFormatConfig:
    """Tests for property-derived formatting features."""

    def test_userdata_reads_properties(self) -> None:
        props = PropertyStore(
            {
                "external_storage.projid.enabled": "1",
                "external_storage.casefold.enabled": "true",
            }
        )
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        assert derive_format_config(spec, props) == FormatConfig(
            needs_projid=True, needs_casefold=True
        )

    def test_userdata_defaults(self) -> None:
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        assert derive_format_config(spec, PropertyStore()) == FormatConfig()

    def test_other_mount_points_skip_lookup(self) -> None:
        props = Mock(spec=PropertyStore)
        spec = PartitionSpec("/dev/block/by-name/cache", "/cache", "f2fs")
        assert derive_format_config(spec, props) == FormatConfig()
        props.get_bool_property.assert_not_called()


class TestTargetSize:
    """Tests for size resolution."""

    def test_probe_when_no_length(self) -> None:
        prober = Mock(return_value=GIB)
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        assert target_size(spec, False, prober) == GIB
        prober.assert_called_once_with(USERDATA)

    def test_declared_length_is_trusted(self) -> None:
        prober = Mock()
        spec = PartitionSpec(USERDATA, "/data", "f2fs", length=512 * 1024 * 1024)
        assert target_size(spec, True, prober) == 512 * 1024 * 1024 - CRYPT_FOOTER_OFFSET
        prober.assert_not_called()


class TestDoFormat:
    """Tests for do_format."""

    @pytest.mark.parametrize("fs_type", ["btrfs", "xfs", "ntfs", "", "EXT4", " f2fs"])
    def test_unsupported_type(self, runner, fs_type: str) -> None:
        prober = Mock()
        spec = PartitionSpec(USERDATA, "/data", fs_type)
        rc = do_format(spec, False, runner=runner, prober=prober)
        assert rc == -errno.EINVAL
        assert runner.invocations == []
        prober.assert_not_called()

    def test_f2fs_probed_size(self, runner) -> None:
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        assert do_format(spec, False, runner=runner, prober=gib_prober) == 0

        [inv] = runner.invocations
        assert inv.executable == "/system/bin/make_f2fs"
        assert inv.arguments[-2:] == (USERDATA, "262144")

    def test_f2fs_crypt_footer(self, runner) -> None:
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        do_format(spec, True, runner=runner, prober=gib_prober)
        assert runner.invocations[0].arguments[-1] == str((GIB - CRYPT_FOOTER_OFFSET) // 4096)

    def test_f2fs_userdata_features(self, runner) -> None:
        props = PropertyStore(
            {
                "external_storage.projid.enabled": "1",
                "external_storage.casefold.enabled": "1",
            }
        )
        spec = PartitionSpec(USERDATA, "/data", "f2fs", flags={FsMgrFlag.COMPRESS})
        do_format(spec, False, properties=props, runner=runner, prober=gib_prober)

        args = runner.invocations[0].arguments
        assert "project_quota,extra_attr" in args
        assert "casefold" in args
        assert "compression" in args

    def test_f2fs_non_userdata_ignores_properties(self, runner) -> None:
        props = PropertyStore({"external_storage.projid.enabled": "1"})
        spec = PartitionSpec("/dev/block/by-name/cache", "/cache", "f2fs")
        do_format(spec, False, properties=props, runner=runner, prober=gib_prober)
        assert "project_quota,extra_attr" not in runner.invocations[0].arguments

    def test_f2fs_tool_failure(self, runner) -> None:
        runner.returncodes = [3]
        spec = PartitionSpec(USERDATA, "/data", "f2fs")
        assert do_format(spec, False, runner=runner, prober=gib_prober) == 3

    def test_declared_length_skips_probe(self, runner) -> None:
        prober = Mock()
        spec = PartitionSpec(USERDATA, "/data", "f2fs", length=64 * 4096)
        do_format(spec, False, runner=runner, prober=prober)
        prober.assert_not_called()
        assert runner.invocations[0].arguments[-1] == "64"

    @pytest.mark.parametrize("error", [DeviceOpenError, DeviceQueryError])
    def test_probe_failure(self, runner, error: type) -> None:
        prober = Mock(side_effect=error(USERDATA, "boom"))
        spec = PartitionSpec(USERDATA, "/data", "ext4")
        assert do_format(spec, False, runner=runner, prober=prober) == -1
        assert runner.invocations == []

    def test_footer_larger_than_device(self, runner) -> None:
        spec = PartitionSpec(USERDATA, "/data", "f2fs", length=4096)
        assert do_format(spec, True, runner=runner) == -errno.EINVAL
        assert runner.invocations == []

    def test_ext4_formats_then_populates(self, runner) -> None:
        props = PropertyStore({"external_storage.projid.enabled": "1"})
        spec = PartitionSpec(USERDATA, "/data", "ext4")
        assert do_format(spec, False, properties=props, runner=runner, prober=gib_prober) == 0

        mke2fs, e2fsdroid = runner.invocations
        assert mke2fs.executable == "/system/bin/mke2fs"
        assert ("-I", "512") == mke2fs.arguments[4:6]
        assert "metadata_csum" not in mke2fs.arguments
        assert mke2fs.arguments[-2:] == (USERDATA, "262144")
        assert e2fsdroid.argv == ["/system/bin/e2fsdroid", "-e", "-a", "/data", USERDATA]

    def test_ext4_metadata_csum_flag(self, runner) -> None:
        spec = PartitionSpec(
            "/dev/block/by-name/metadata", "/metadata", "ext4", flags={FsMgrFlag.EXT_META_CSUM}
        )
        do_format(spec, False, runner=runner, prober=gib_prober)
        args = list(runner.invocations[0].arguments)
        assert args.index("metadata_csum") < args.index("64bit") < args.index("extent")

    def test_ext4_mke2fs_failure_skips_populate(self, runner) -> None:
        runner.returncodes = [5]
        spec = PartitionSpec(USERDATA, "/data", "ext4")
        assert do_format(spec, False, runner=runner, prober=gib_prober) == 5
        assert len(runner.invocations) == 1

    def test_ext4_populate_failure(self, runner) -> None:
        runner.returncodes = [0, 7]
        spec = PartitionSpec(USERDATA, "/data", "ext4")
        assert do_format(spec, False, runner=runner, prober=gib_prober) == 7
        assert len(runner.invocations) == 2

    def test_vfat(self, runner, temp_dir: Path) -> None:
        prober = Mock()
        builder = ArgumentBuilder(ToolsConfig(newfs_msdos=str(temp_dir / "newfs_msdos")))
        spec = PartitionSpec("/dev/block/mmcblk1p1", "/sdcard", "vfat")

        with capture_logs() as logs:
            rc = do_format(spec, True, runner=runner, builder=builder, prober=prober)

        assert rc == 0
        [warning] = [e for e in logs if e["log_level"] == "warning"]
        assert warning["event"] == "Formatter not executable"
        assert warning["tool"] == str(temp_dir / "newfs_msdos")
        [inv] = runner.invocations
        assert inv.arguments == ("-O", "android", "/dev/block/mmcblk1p1")
        prober.assert_not_called()

    def test_vfat_ready_no_warning(self, runner, temp_dir: Path) -> None:
        tool = temp_dir / "newfs_msdos"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o755)
        builder = ArgumentBuilder(ToolsConfig(newfs_msdos=str(tool)))
        spec = PartitionSpec("/dev/block/mmcblk1p1", "/sdcard", "vfat")

        with capture_logs() as logs:
            assert do_format(spec, False, runner=runner, builder=builder) == 0

        assert not [e for e in logs if e["log_level"] == "warning"]

    def test_vfat_tool_failure(self, runner) -> None:
        runner.returncodes = [1]
        spec = PartitionSpec("/dev/block/mmcblk1p1", "/sdcard", "vfat")
        assert do_format(spec, False, runner=runner) == 1
