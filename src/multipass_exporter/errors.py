"""
Errors raised while collecting from the multipass CLI.

Every scrape-level failure is a CollectionError. The collector catches that
base class once and turns it into the error gauge, so nothing here is ever
fatal to the serving process.
"""

from __future__ import annotations

from typing import Optional


class CollectionError(Exception):
    """Base class for anything that aborts one scrape."""


class FetchTimeout(CollectionError):

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"multipass info timed out after {timeout:g}s")


class ExecutionFailure(CollectionError):
    """The command exited non-zero, or could not be started at all."""

    def __init__(self, returncode: Optional[int], stderr: str):
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            detail = "could not be started"
        else:
            detail = f"exited with status {returncode}"
        super().__init__(f"multipass info {detail}: {stderr.strip()}")


class ParseFailure(CollectionError):
    """Stdout was not the JSON document we expected.

    Keeps the raw output around so the log line is enough to diagnose a
    schema change in the multipass CLI.
    """

    def __init__(self, reason: str, stdout: str = "", stderr: str = ""):
        self.reason = reason
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"error parsing multipass info JSON: {reason}; stdout={stdout!r}; stderr={stderr!r}"
        )


class ConfigError(Exception):
    """Configuration file could not be read or holds invalid values."""
