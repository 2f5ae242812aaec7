"""
fsmgr Platform Base.

Defines the process execution interface the dispatchers depend on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fsmgr.core.models import ToolInvocation


class LogTarget(Enum):
    """Where captured tool output goes."""

    NONE = auto()  # Discard
    LOG = auto()  # Forward each line to the structured log


class ProcessRunner(ABC):
    """Runs external tools synchronously.

    Invocations made through :meth:`execute` are kept in ``invocations``
    in the order they ran.
    """

    def __init__(self) -> None:
        self.invocations: list[ToolInvocation] = []

    @abstractmethod
    def run(
        self,
        executable: str,
        arguments: Sequence[str],
        capture_output: bool = True,
        log_target: LogTarget = LogTarget.LOG,
    ) -> int:
        """
        Run ``executable`` with ``arguments`` and wait for it to exit.
        Returns the exit code; nonzero means failure.
        """

    def execute(self, invocation: ToolInvocation) -> int:
        """Run a prepared tool invocation, logging its output."""
        self.invocations.append(invocation)
        return self.run(
            invocation.executable,
            invocation.arguments,
            capture_output=True,
            log_target=LogTarget.LOG,
        )
