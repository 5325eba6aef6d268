"""Runs commands as real child processes via subprocess."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from multipass_exporter.collector.base import CommandResult, CommandRunner

log = logging.getLogger(__name__)


def _text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class SubprocessRunner(CommandRunner):

    def run(self, command: str, args: Sequence[str], timeout: float) -> CommandResult:
        argv = [command, *args]
        log.debug("Executing %s (timeout=%ss)", " ".join(argv), timeout)

        try:
            # subprocess.run kills the child itself once the timeout expires
            proc = subprocess.run(
                argv,
                check=False,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                returncode=None,
                stdout=_text(exc.stdout),
                stderr=_text(exc.stderr),
                timed_out=True,
            )
        except OSError as exc:
            # Binary missing or not executable
            return CommandResult(returncode=None, stderr=str(exc))

        return CommandResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def name(self) -> str:
        return "subprocess"
