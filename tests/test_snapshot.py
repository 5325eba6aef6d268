"""Tests for decoding `multipass info --format=json` into an InstanceSnapshot."""

import json

import pytest

from multipass_exporter.snapshot import (
    InstanceRecord,
    InstanceSnapshot,
    SnapshotFormatError,
    parse_snapshot,
)


def test_parses_recorded_output(multipass_info_text):
    snap = parse_snapshot(multipass_info_text)

    assert list(snap) == ["instance1", "instance2"]

    first = snap["instance1"]
    assert first.state == "Running"
    assert first.release == "Ubuntu 22.04.4 LTS"
    assert first.memory_used_bytes == 536870912
    assert first.memory_total_bytes == 1073741824
    assert first.cpu_count == "2"
    assert first.load == (0.12, 0.25, 0.31)
    assert first.ipv4 == ("192.168.64.2",)
    assert first.disks["sda1"].total == "5120710656"

    second = snap["instance2"]
    assert second.state == "Stopped"
    assert second.cpus is None
    assert second.load is None
    assert second.disks["sda1"].used == ""


def test_unknown_fields_are_ignored():
    text = json.dumps({
        "errors": [],
        "future_top_level": {"x": 1},
        "info": {"vm": {"state": "Running", "brand_new_field": [1, 2, 3]}},
    })
    snap = parse_snapshot(text)
    assert snap["vm"].state == "Running"


def test_missing_and_null_fields_take_zero_values():
    snap = parse_snapshot('{"info": {"vm": {"state": "Running", "load": null, "memory": null}}}')
    record = snap["vm"]
    assert record.name == "vm"
    assert record.release == ""
    assert record.memory_used_bytes == 0
    assert record.has_memory_usage is False
    assert record.load_averages == ()


def test_missing_info_is_empty_snapshot():
    assert len(parse_snapshot('{"errors": []}')) == 0
    assert len(parse_snapshot("null")) == 0


def test_invalid_json_raises_value_error():
    with pytest.raises(ValueError):
        parse_snapshot("not json at all")
    with pytest.raises(ValueError):
        parse_snapshot("")


@pytest.mark.parametrize("text", [
    "[]",
    '{"info": []}',
    '{"info": {"vm": "Running"}}',
    '{"info": {"vm": {"state": 3}}}',
    '{"info": {"vm": {"memory": {"used": "lots"}}}}',
    '{"info": {"vm": {"memory": {"used": true}}}}',
    '{"info": {"vm": {"load": "high"}}}',
    '{"info": {"vm": {"load": [1, "x", 3]}}}',
    '{"info": {"vm": {"cpu_count": 2}}}',
    "NaN",
    '{"info": {"vm": {"state": "Running", "load": [NaN, Infinity, -Infinity]}}}',
    '{"info": {"vm": {"memory": {"used": Infinity}}}}',
])
def test_wrong_types_are_format_errors(text):
    with pytest.raises(SnapshotFormatError):
        parse_snapshot(text)


def test_info_key_is_the_instance_name():
    snap = parse_snapshot(
        '{"info": {"": {"name": "foo", "state": "Running"}, "foo": {"state": "Stopped"}}}'
    )

    assert list(snap) == ["", "foo"]
    assert snap[""].name == ""
    assert snap["foo"].name == "foo"
    assert snap["foo"].state == "Stopped"


def test_cpu_count_parsing():
    assert InstanceRecord(name="a", cpu_count="3").cpus == 3
    assert InstanceRecord(name="a", cpu_count=" 4 ").cpus == 4
    assert InstanceRecord(name="a", cpu_count="abc").cpus is None
    assert InstanceRecord(name="a", cpu_count="").cpus is None


def test_load_requires_exactly_three_samples():
    assert InstanceRecord(name="a", load_averages=(1.0,)).load is None
    assert InstanceRecord(name="a", load_averages=(1.0, 2.0, 3.0, 4.0)).load is None
    assert InstanceRecord(name="a", load_averages=(0.1, 0.2, 0.3)).load == (0.1, 0.2, 0.3)


def test_snapshot_is_read_only():
    snap = InstanceSnapshot({"a": InstanceRecord(name="a")})
    with pytest.raises(TypeError):
        snap["b"] = InstanceRecord(name="b")


def test_count_state():
    snap = InstanceSnapshot({
        "a": InstanceRecord(name="a", state="Running"),
        "b": InstanceRecord(name="b", state="Running"),
        "c": InstanceRecord(name="c", state="Starting"),
    })
    assert snap.count_state("Running") == 2
    assert snap.count_state("Stopped") == 0
