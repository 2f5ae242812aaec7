"""
Android fstab parsing.

Each entry has five whitespace separated fields::

    <src> <mnt_point> <type> <mnt_flags> <fs_mgr_flags>

Only the parts relevant to formatting are kept: the device, the mount
point, the type, the ``length=`` option and the feature flags.
"""

from __future__ import annotations

from pathlib import Path

from fsmgr.core.errors import FstabParseError
from fsmgr.core.logging import get_logger
from fsmgr.core.models import FsMgrFlag, PartitionSpec

logger = get_logger(__name__)


def _parse_length(value: str, line: str) -> int:
    try:
        length = int(value, 0)
    except ValueError:
        raise FstabParseError(line, f"invalid length '{value}'") from None
    if length < 0:
        raise FstabParseError(line, "negative length is not supported")
    return length


def parse_fstab_line(line: str) -> PartitionSpec:
    """Parse a single non-comment fstab line."""
    fields = line.split()
    if len(fields) < 5:
        raise FstabParseError(line, f"expected 5 fields, got {len(fields)}")

    block_device, mount_point, fs_type, _mnt_flags, fs_mgr_flags = fields[:5]

    length = 0
    flags: set[FsMgrFlag] = set()
    for option in fs_mgr_flags.split(","):
        name, _, value = option.partition("=")
        if name == "length":
            length = _parse_length(value, line)
            continue
        flag = FsMgrFlag.from_string(name)
        if flag is not None:
            flags.add(flag)

    return PartitionSpec(
        block_device=block_device,
        mount_point=mount_point,
        fs_type=fs_type,
        length=length,
        flags=frozenset(flags),
    )


def parse_fstab(text: str) -> list[PartitionSpec]:
    """Parse fstab content, skipping comments and malformed lines."""
    entries: list[PartitionSpec] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            entries.append(parse_fstab_line(line))
        except FstabParseError as e:
            logger.warning("Skipping fstab line", line=lineno, reason=e.reason)
    return entries


def load_fstab(path: Path) -> list[PartitionSpec]:
    return parse_fstab(path.read_text(encoding="utf-8"))


def find_entry(entries: list[PartitionSpec], mount_point: str) -> PartitionSpec | None:
    """Return the first entry mounted at ``mount_point``."""
    for entry in entries:
        if entry.mount_point == mount_point:
            return entry
    return None
