"""
Runner that answers `multipass info` from the mock generator.
Used for local development on machines without Multipass.
"""

from typing import Sequence

from multipass_exporter.collector.base import CommandResult, CommandRunner
from multipass_exporter.mock.generator import MockMultipass


class MockRunner(CommandRunner):
    """Wraps the mock generator as a standard runner."""

    def __init__(self, seed: int = 42):
        self._multipass = MockMultipass(seed=seed)

    def run(self, command: str, args: Sequence[str], timeout: float) -> CommandResult:
        if command != "multipass" or list(args[:1]) != ["info"]:
            return CommandResult(returncode=2, stderr=f"mock: unsupported command {command} {' '.join(args)}")
        return CommandResult(returncode=0, stdout=self._multipass.text())

    def name(self) -> str:
        return f"Mock multipass ({self._multipass.instance_count} simulated instances)"
