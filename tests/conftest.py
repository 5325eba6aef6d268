"""Shared fixtures: a recorded `multipass info` document and a scripted runner."""

from pathlib import Path
from typing import List, Sequence

import pytest

from multipass_exporter.collector.base import CommandResult, CommandRunner

FIXTURES = Path(__file__).parent / "fixtures"


class ScriptedRunner(CommandRunner):
    """Returns a canned CommandResult and remembers every call."""

    def __init__(self, result: CommandResult):
        self.result = result
        self.calls: List[tuple] = []

    def run(self, command: str, args: Sequence[str], timeout: float) -> CommandResult:
        self.calls.append((command, tuple(args), timeout))
        return self.result

    def name(self) -> str:
        return "scripted"


@pytest.fixture
def multipass_info_text() -> str:
    return (FIXTURES / "multipass_info.json").read_text()


@pytest.fixture
def make_runner():
    def _make(stdout: str = "", stderr: str = "", returncode=0, timed_out: bool = False) -> ScriptedRunner:
        return ScriptedRunner(CommandResult(
            returncode=returncode, stdout=stdout, stderr=stderr, timed_out=timed_out,
        ))
    return _make
