"""
Pytest configuration and fixtures for fsmgr tests.
"""

import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fsmgr.core.constants import F2FS_SUPER_MAGIC  # noqa: E402
from fsmgr.core.models import SuperblockHeader  # noqa: E402
from fsmgr.platform.base import LogTarget, ProcessRunner  # noqa: E402

# Keep log output off stdout.
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(colors=False),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
)


class RecordingRunner(ProcessRunner):
    """Process runner that replays exit codes instead of running tools."""

    def __init__(self) -> None:
        super().__init__()
        self.returncodes: list[int] = []

    def run(
        self,
        executable: str,
        arguments: Sequence[str],
        capture_output: bool = True,
        log_target: LogTarget = LogTarget.LOG,
    ) -> int:
        return self.returncodes.pop(0) if self.returncodes else 0


def pack_superblock(magic: int = F2FS_SUPER_MAGIC, block_count: int = 0) -> bytes:
    return SuperblockHeader.FORMAT.pack(magic, 1, 15, 0, 0, 0, 0, 0, 0, 512, block_count)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def make_image(temp_dir: Path) -> Callable[..., Path]:
    """Factory writing a disk image with headers at given offsets."""

    def _make(size: int = 16384, headers: dict[int, bytes] | None = None) -> Path:
        data = bytearray(size)
        for offset, header in (headers or {}).items():
            data[offset : offset + len(header)] = header
        path = temp_dir / "disk.img"
        path.write_bytes(bytes(data))
        return path

    return _make


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


@pytest.fixture
def superblock_bytes() -> Callable[..., bytes]:
    return pack_superblock
