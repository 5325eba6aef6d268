"""
Typed view of `multipass info --format=json`.

One InstanceSnapshot is built per scrape and thrown away afterwards. Fields
the exporter doesn't publish (ipv4, disks, mounts, image info) are still
decoded so the record reflects what the CLI actually reported.

Decoding mirrors a strict-but-forgiving JSON decoder: unknown keys are
ignored and missing/null keys become zero values, but a key that is present
with the wrong JSON type is an error.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple


STATE_RUNNING = "Running"
STATE_STOPPED = "Stopped"
STATE_DELETED = "Deleted"
STATE_SUSPENDED = "Suspended"


class SnapshotFormatError(ValueError):
    """The document isn't strict JSON or doesn't match the expected schema."""


@dataclass(frozen=True)
class DiskUsage:
    total: str = ""
    used: str = ""


@dataclass(frozen=True)
class InstanceRecord:
    """A single instance as reported by the multipass CLI."""

    name: str
    state: str = ""
    release: str = ""

    # Bytes. used == 0 means "not measured" (e.g. instance stopped)
    memory_used_bytes: int = 0
    memory_total_bytes: int = 0

    # Textual, may be empty
    cpu_count: str = ""

    # (1m, 5m, 15m) when present, otherwise whatever the CLI sent
    load_averages: Tuple[float, ...] = ()

    ipv4: Tuple[str, ...] = ()
    image_hash: str = ""
    image_release: str = ""
    disks: Dict[str, DiskUsage] = field(default_factory=dict, compare=False)
    mounts: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def has_memory_usage(self) -> bool:
        return self.memory_used_bytes != 0

    @property
    def cpus(self) -> Optional[int]:
        """cpu_count as an int, or None when it's empty or not a number."""
        try:
            return int(self.cpu_count.strip())
        except ValueError:
            return None

    @property
    def load(self) -> Optional[Tuple[float, float, float]]:
        if len(self.load_averages) != 3:
            return None
        one, five, fifteen = self.load_averages
        return one, five, fifteen


class InstanceSnapshot(Mapping):
    """Read-only, ordered mapping of instance name -> InstanceRecord."""

    def __init__(self, records: Optional[Mapping[str, InstanceRecord]] = None):
        self._records: Dict[str, InstanceRecord] = dict(records or {})

    def __getitem__(self, name: str) -> InstanceRecord:
        return self._records[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"InstanceSnapshot({list(self._records)!r})"

    def count_state(self, state: str) -> int:
        return sum(1 for record in self._records.values() if record.state == state)


# -- Decoding --


def _get(entry: Mapping, key: str, expected: tuple, where: str, default):
    value = entry.get(key)
    if value is None:
        return default
    # bool is an int subclass; JSON true/false is never a number here
    if isinstance(value, bool) or not isinstance(value, expected):
        raise SnapshotFormatError(
            f"{where}.{key}: expected {expected[0].__name__}, got {type(value).__name__}"
        )
    return value


def _string_list(entry: Mapping, key: str, where: str) -> Tuple[str, ...]:
    items = _get(entry, key, (list,), where, [])
    for item in items:
        if not isinstance(item, str):
            raise SnapshotFormatError(f"{where}.{key}: expected list of str")
    return tuple(items)


def _float_list(entry: Mapping, key: str, where: str) -> Tuple[float, ...]:
    items = _get(entry, key, (list,), where, [])
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise SnapshotFormatError(f"{where}.{key}: expected list of numbers")
    return tuple(float(item) for item in items)


def _parse_disks(entry: Mapping, where: str) -> Dict[str, DiskUsage]:
    disks = _get(entry, "disks", (dict,), where, {})
    parsed = {}
    for disk_name, disk in disks.items():
        disk_where = f"{where}.disks.{disk_name}"
        if not isinstance(disk, dict):
            raise SnapshotFormatError(f"{disk_where}: expected object")
        parsed[disk_name] = DiskUsage(
            total=_get(disk, "total", (str,), disk_where, ""),
            used=_get(disk, "used", (str,), disk_where, ""),
        )
    return parsed


def parse_instance(key: str, entry: Any) -> InstanceRecord:
    where = f"info.{key}"
    if not isinstance(entry, dict):
        raise SnapshotFormatError(f"{where}: expected object, got {type(entry).__name__}")

    memory = _get(entry, "memory", (dict,), where, {})
    memory_where = f"{where}.memory"

    return InstanceRecord(
        name=key,
        state=_get(entry, "state", (str,), where, ""),
        release=_get(entry, "release", (str,), where, ""),
        memory_used_bytes=_get(memory, "used", (int,), memory_where, 0),
        memory_total_bytes=_get(memory, "total", (int,), memory_where, 0),
        cpu_count=_get(entry, "cpu_count", (str,), where, ""),
        load_averages=_float_list(entry, "load", where),
        ipv4=_string_list(entry, "ipv4", where),
        image_hash=_get(entry, "image_hash", (str,), where, ""),
        image_release=_get(entry, "image_release", (str,), where, ""),
        disks=_parse_disks(entry, where),
        mounts=_get(entry, "mounts", (dict,), where, {}),
    )


def _reject_constant(token: str):
    # NaN and Infinity are Python extensions, not JSON
    raise SnapshotFormatError(f"invalid JSON token {token}")


def parse_snapshot(text: str) -> InstanceSnapshot:
    """Decode CLI stdout into a snapshot.

    Raises ValueError (json.JSONDecodeError or SnapshotFormatError) when the
    text isn't a usable document.
    """
    document = json.loads(text, parse_constant=_reject_constant)
    if document is None:
        return InstanceSnapshot()
    if not isinstance(document, dict):
        raise SnapshotFormatError(f"expected top-level object, got {type(document).__name__}")

    info = _get(document, "info", (dict,), "document", {})
    return InstanceSnapshot({key: parse_instance(key, entry) for key, entry in info.items()})
