"""
Snapshot fetcher. Runs `multipass info --format=json` once per call and
maps the outcome to either an InstanceSnapshot or a CollectionError.

No retries here: a failed fetch fails the scrape, and the next scrape
starts from scratch.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from multipass_exporter.collector.base import CommandRunner
from multipass_exporter.collector.subprocess_runner import SubprocessRunner
from multipass_exporter.errors import ExecutionFailure, FetchTimeout, ParseFailure
from multipass_exporter.snapshot import InstanceSnapshot, parse_snapshot

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0
MULTIPASS_COMMAND = "multipass"
INFO_ARGS = ("info", "--format=json")


class SnapshotFetcher:

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        command: str = MULTIPASS_COMMAND,
        args: Sequence[str] = INFO_ARGS,
    ):
        self._runner = runner or SubprocessRunner()
        self._timeout = timeout_seconds
        self._command = command
        self._args = tuple(args)

    @property
    def timeout(self) -> float:
        return self._timeout

    def fetch(self) -> InstanceSnapshot:
        """Run the info command and decode its output.

        Raises FetchTimeout, ExecutionFailure or ParseFailure.
        """
        log.debug("Executing %s %s", self._command, " ".join(self._args))
        result = self._runner.run(self._command, self._args, self._timeout)

        if result.timed_out:
            log.error("%s info command timed out after %ss", self._command, self._timeout)
            raise FetchTimeout(self._timeout)

        if result.returncode != 0:
            log.error(
                "%s info command failed (status=%s): %s",
                self._command, result.returncode, result.stderr.strip(),
            )
            raise ExecutionFailure(result.returncode, result.stderr)

        try:
            snapshot = parse_snapshot(result.stdout)
        except ValueError as exc:
            log.error("Failed to parse %s info JSON: %s", self._command, exc)
            raise ParseFailure(str(exc), stdout=result.stdout, stderr=result.stderr) from exc

        log.info("Successfully parsed %s info: %d instances", self._command, len(snapshot))
        return snapshot

    def name(self) -> str:
        return f"{self._command} {' '.join(self._args)} via {self._runner.name()}"
