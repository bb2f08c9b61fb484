from __future__ import annotations

import pytest

from xap.protocol import (
    Block,
    InvalidFieldValue,
    MissingRequiredField,
    build_header,
    build_heartbeat,
    load_schema,
    parse_header_fields,
    parse_heartbeat_fields,
    validate_header_fields,
    validate_heartbeat_fields,
)

HEADER_ITEMS = {"v": "13", "hop": "1", "uid": "ff.1234:00", "class": "Xap.Test", "source": "Vendor.Device.Instance"}
HEARTBEAT_ITEMS = {**HEADER_ITEMS, "class": "XAP-HBEAT.ALIVE", "interval": "60"}


def _block(name, items, **overrides):
    merged = {**items, **overrides}
    return Block(name, {key: value for key, value in merged.items() if value is not None})


def test_header_fields_are_canonicalized():
    header = build_header("Class", "ff.12345678:0000", "Vendor.Device.Instance", target="Some.Target")

    fields = parse_header_fields(header)

    assert fields is not None
    assert fields.v == 13
    assert fields.hop == 1
    assert fields.uid == "FF.12345678:0000"
    assert fields.msg_class == "class"
    assert fields.source == "vendor.device.instance"
    assert fields.target == "some.target"


def test_header_without_target():
    fields = parse_header_fields(_block("xap-header", HEADER_ITEMS))

    assert fields is not None
    assert fields.target is None


def test_version_12_is_accepted():
    fields = parse_header_fields(_block("xap-header", HEADER_ITEMS, v="12"))

    assert fields is not None
    assert fields.v == 12


def test_header_missing_item_is_invalid():
    block = _block("xap-header", HEADER_ITEMS, source=None)

    assert parse_header_fields(block) is None
    with pytest.raises(MissingRequiredField) as excinfo:
        validate_header_fields(block)
    assert excinfo.value.field == "source"


@pytest.mark.parametrize(
    "item,value",
    [("v", "11"), ("v", "x"), ("hop", "0"), ("hop", "-1"), ("uid", ""), ("class", ""), ("source", ""), ("target", "")],
)
def test_header_with_bad_value_is_invalid(item, value):
    block = _block("xap-header", HEADER_ITEMS, **{item: value})

    assert parse_header_fields(block) is None
    with pytest.raises(InvalidFieldValue):
        validate_header_fields(block)


@pytest.mark.parametrize("value", ["1_3", "13.0", "+13", "0x0d", "1e1", "\uff11\uff13"])
def test_version_must_be_plain_digits(value):
    block = _block("xap-header", HEADER_ITEMS, v=value)

    with pytest.raises(InvalidFieldValue) as excinfo:
        validate_header_fields(block)
    assert excinfo.value.field == "v"


def test_heartbeat_fields_are_canonicalized():
    fields = parse_heartbeat_fields(_block("xap-hbeat", HEARTBEAT_ITEMS))

    assert fields is not None
    assert fields.uid == "FF.1234:00"
    assert fields.msg_class == "xap-hbeat.alive"
    assert fields.source == "vendor.device.instance"
    assert fields.interval == 60
    assert fields.port is None
    assert fields.pid is None


def test_built_heartbeat_with_port_validates():
    fields = parse_heartbeat_fields(build_heartbeat("alive", "FF.1234:00", "v.d.i", 120, 56001))

    assert fields is not None
    assert fields.interval == 120
    assert fields.port == 56001
    assert fields.pid


def test_heartbeat_missing_interval_is_invalid():
    block = _block("xap-hbeat", HEARTBEAT_ITEMS, interval=None)

    assert parse_heartbeat_fields(block) is None
    with pytest.raises(MissingRequiredField) as excinfo:
        validate_heartbeat_fields(block)
    assert excinfo.value.field == "interval"


def test_heartbeat_with_hop_zero_is_invalid():
    block = _block("xap-hbeat", HEARTBEAT_ITEMS, hop="0")

    assert parse_heartbeat_fields(block) is None
    with pytest.raises(InvalidFieldValue) as excinfo:
        validate_heartbeat_fields(block)
    assert excinfo.value.field == "hop"


@pytest.mark.parametrize(
    "item,value",
    [
        ("interval", "0"),
        ("interval", "soon"),
        ("interval", "6_0"),
        ("interval", "60.0"),
        ("port", "0"),
        ("port", "3_639"),
        ("pid", ""),
    ],
)
def test_heartbeat_with_bad_value_is_invalid(item, value):
    assert parse_heartbeat_fields(_block("xap-hbeat", HEARTBEAT_ITEMS, **{item: value})) is None


def test_unrelated_block_is_invalid_without_raising():
    block = Block("something.else", {"a": 1})

    assert parse_header_fields(block) is None
    assert parse_heartbeat_fields(block) is None


def test_options_schema_is_bundled():
    schema = load_schema("options")

    assert schema is not None
    assert "hb_interval" in schema["properties"]
    assert load_schema("missing") is None
