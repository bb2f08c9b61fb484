from __future__ import annotations

import time

import pytest

from xap.protocol import (
    Block,
    IncompleteMessage,
    Message,
    build_header,
    decode_msg,
    encode_blocks,
    encode_msg,
    parse_blocks,
)


def test_parse_single_block():
    blocks = parse_blocks("block\n{\nkey=value\n}\n")

    assert len(blocks) == 1
    assert blocks[0].name == "block"
    assert blocks[0].get_value("key") == "value"


def test_parse_keeps_name_and_item_order():
    block = Block("my.block", {"strVal": "a string value", "numVal": 2001, "Mixed Case": "x=y"})

    parsed = parse_blocks(block.to_text())

    assert len(parsed) == 1
    assert parsed[0].name == "my.block"
    assert [(item.name, item.value) for item in parsed[0]] == [
        ("strVal", "a string value"),
        ("numVal", "2001"),
        ("Mixed Case", "x=y"),
    ]


def test_parse_message_with_several_blocks():
    msg = Message.from_blocks(
        [build_header("xap.test", "FF.1234:00", "v.d.i"), Block("one", {"a": 1}), Block("two", {"b": 2})]
    )

    blocks = parse_blocks(encode_blocks(msg))

    assert [block.name for block in blocks] == ["xap-header", "one", "two"]
    assert blocks[0].get_value("uid") == "FF.1234:00"
    assert blocks[2].get_value("b") == "2"


def test_parse_ignores_leading_whitespace_on_lines():
    blocks = parse_blocks("block\n{\n  key=value\n\tother=1\n}\n")

    assert [item.name for item in blocks[0]] == ["key", "other"]


def test_hex_value_binds_to_its_own_item():
    text = "data\n{\nfirst=plain\nsecond!0aff10\nthird=after\n}\n"

    block = parse_blocks(text)[0]

    assert block.find("first").raw is None
    assert block.find("second").raw == b"\x0a\xff\x10"
    assert block.find("second").value == "0aff10"
    assert block.find("third").raw is None
    assert block.to_text() == text


@pytest.mark.parametrize(
    "text",
    [
        "",
        "just some text",
        "block\n{\nkey=value\n",
        "block\n{\nkey!abc\n}\n",
        "block\n{\nkey!zz\n}\n",
        "block\n{\nkey=1\nKEY=2\n}\n",
    ],
)
def test_malformed_text_yields_no_blocks(text):
    assert parse_blocks(text) == []


LARGE = 64 * 1024


@pytest.mark.parametrize(
    "text, names",
    [
        ("a" * LARGE, []),
        (" " * LARGE + "\n{\n}\n", []),
        ("b\n{\n" + "a" * LARGE + "\n}\n", ["b"]),
        ("x\n{\n" * (LARGE // 4) + "}", []),
        ("bad=name\n{\n" * (LARGE // 11) + "}\n", []),
        ("b\n{\n" + "k " * (LARGE // 2) + "\n}\n", ["b"]),
    ],
    ids=["no-newline", "blank-name", "long-line", "unclosed", "bad-names", "no-separator"],
)
def test_large_datagrams_parse_in_linear_time(text, names):
    started = time.perf_counter()

    blocks = parse_blocks(text)

    assert time.perf_counter() - started < 1.0
    assert [block.name for block in blocks] == names


def test_long_item_line_is_kept():
    key = "k" * LARGE

    block = parse_blocks(f"b\n{{\n{key}=v\n}}\n")[0]

    assert block.get_value(key) == "v"


def test_name_line_must_start_a_line():
    blocks = parse_blocks("key=value\n{\nk=v\n}\nblock\n{\nk=1\n}\n")

    assert [block.name for block in blocks] == ["block"]


def test_decode_rejects_invalid_utf8():
    assert decode_msg(b"\xff\xfe\xfd") == []


def test_decode_parses_datagram():
    blocks = decode_msg(b"block\n{\nkey=value\n}\n")

    assert blocks[0].get_value("key") == "value"


def test_encode_sequence_of_blocks():
    text = encode_blocks([Block("a", {"x": 1}), Block("b", {"y": 2})])

    assert text == "a\n{\nx=1\n}\nb\n{\ny=2\n}\n"


def test_encode_msg_is_utf8():
    assert encode_msg(Block("b", {"k": "é"})) == "b\n{\nk=é\n}\n".encode("utf-8")


def test_message_exposes_header_views():
    msg = Message(build_header("Xap.Test", "ff.1234:00", "V.D.I"), Block("body", {"k": "v"}))

    assert msg.msg_class == "xap.test"
    assert msg.source == "v.d.i"
    assert msg.header.uid == "FF.1234:00"
    assert msg.get_first_block_value("K") == "v"
    assert msg.get_header_value("hop") == "1"
    assert msg.get_block_value(1, "missing") is None


def test_message_serializes_every_block():
    msg = Message(build_header("c", "FF.1234:00", "v.d.i"), Block("one", {"a": 1}))
    msg.add(Block("two", {"b": 2}))

    assert len(msg) == 3
    assert msg.to_text().endswith("one\n{\na=1\n}\ntwo\n{\nb=2\n}\n")


def test_message_needs_a_body():
    with pytest.raises(IncompleteMessage):
        Message.from_blocks([build_header("c", "FF.1234:00", "v.d.i")])
