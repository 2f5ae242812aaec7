"""
Process runners.

``SubprocessRunner`` spawns the real tools. ``DryRunRunner`` only logs
what would have been run.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from collections.abc import Sequence

from fsmgr.core.logging import get_logger, tool_logger
from fsmgr.core.models import ToolInvocation
from fsmgr.platform.base import LogTarget, ProcessRunner

logger = get_logger(__name__)


def is_executable(tool: str) -> bool:
    """Check if a tool is present and executable.

    Absolute or relative paths are checked directly; bare names are
    looked up on PATH.
    """
    if os.sep in tool:
        return os.access(tool, os.X_OK)
    return shutil.which(tool) is not None


class SubprocessRunner(ProcessRunner):
    """Runs tools with :mod:`subprocess`, blocking until they exit."""

    def run(
        self,
        executable: str,
        arguments: Sequence[str],
        capture_output: bool = True,
        log_target: LogTarget = LogTarget.LOG,
    ) -> int:
        command = [executable, *arguments]
        logger.debug("Running command", command=command)
        start_time = time.time()

        try:
            result = subprocess.run(
                command,
                capture_output=capture_output,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            logger.error("Failed to execute", command=command, error=str(e))
            return -1

        duration = time.time() - start_time
        output_log = tool_logger(os.path.basename(executable))

        if capture_output and log_target is LogTarget.LOG:
            for stream in (result.stdout, result.stderr):
                for line in (stream or "").splitlines():
                    if line.strip():
                        output_log.info(line)

        if result.returncode != 0:
            output_log.warning(
                "Command failed",
                command=command,
                returncode=result.returncode,
                duration_seconds=duration,
            )
        else:
            logger.debug("Command finished", command=command, duration_seconds=duration)

        return result.returncode


class DryRunRunner(ProcessRunner):
    """Logs invocations instead of running them."""

    def run(
        self,
        executable: str,
        arguments: Sequence[str],
        capture_output: bool = True,
        log_target: LogTarget = LogTarget.LOG,
    ) -> int:
        logger.info("Would run", command=str(ToolInvocation(executable, tuple(arguments))))
        return 0
