"""
Command runner interface.

A runner is anything that can run a named command with arguments under a
deadline and hand back what it printed. The fetcher only talks to this
interface, so tests (and --mock) never need a real multipass binary.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class CommandResult:
    returncode: Optional[int]  # None when the command never started
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0


class CommandRunner(ABC):
    """Interface for all process launchers."""

    @abstractmethod
    def run(self, command: str, args: Sequence[str], timeout: float) -> CommandResult:
        """Run `command args...`, killing it if it outlives `timeout` seconds."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this runner."""
        ...
