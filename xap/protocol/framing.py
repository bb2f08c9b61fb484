from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Tuple, Union

from .blocks import Block, BlockItem
from .constants import ENCODING
from .errors import ProtocolError
from .messages import Message

logger = logging.getLogger(__name__)

# A block name line followed by the opening brace line.
BLOCK_START = re.compile(r"^([^\n{}]*)\n\{\n", re.MULTILINE)
BLOCK_NAME = re.compile(r"[A-Za-z0-9_.-][ A-Za-z0-9_.-]*")
# One ``key=value`` or ``key!hexpairs`` line inside a body.
ITEM_LINE = re.compile(r"([A-Za-z0-9_.-][ A-Za-z0-9_.-]*)([=!])(.*)")

Encodable = Union[Message, Block, Iterable[Block]]


def decode_hex(text: str) -> bytes:
    """Pairs of hex characters to bytes; raises ValueError when malformed."""
    if len(text) % 2:
        raise ValueError(f"odd number of hex digits in {text!r}")
    return bytes.fromhex(text)


def _parse_block(name: str, body: str) -> Block:
    block = Block(name)
    # the fragment after the last newline is never a complete line
    for line in body.split("\n")[:-1]:
        match = ITEM_LINE.match(line.lstrip())
        if match is None:
            continue
        key, separator, value = match.group(1).strip(), match.group(2), match.group(3)
        raw = decode_hex(value) if separator == "!" else None
        block.append_item(BlockItem(name=key, value=value, raw=raw))
    return block


def _scan_blocks(text: str) -> Iterator[Tuple[str, str]]:
    pos = 0
    close = -1
    while True:
        start = BLOCK_START.search(text, pos)
        if start is None:
            return
        if close < start.end():
            close = text.find("}", start.end())
            if close < 0:
                return
        if text[close + 1 : close + 2] != "\n":
            # every block opened before this brace would close on it
            pos = close + 1
            continue
        name = start.group(1).strip()
        if BLOCK_NAME.fullmatch(name):
            yield name, text[start.end() : close]
            pos = close + 2
        else:
            pos = start.end() - 2


def parse_blocks(text: str) -> List[Block]:
    """Extract every block from ``text``; malformed input yields ``[]``."""
    blocks: List[Block] = []
    try:
        for name, body in _scan_blocks(text):
            blocks.append(_parse_block(name, body))
    except (ProtocolError, ValueError) as exc:
        logger.debug("Discarding malformed text: %s", exc)
        return []
    return blocks


def decode_msg(data: bytes) -> List[Block]:
    """Decode a received datagram into blocks."""
    try:
        text = data.decode(ENCODING)
    except UnicodeDecodeError as exc:
        logger.debug("Discarding undecodable datagram: %s", exc)
        return []
    return parse_blocks(text)


def encode_blocks(obj: Encodable) -> str:
    """Wire text for a message, a single block or a sequence of blocks."""
    if isinstance(obj, (Message, Block)):
        return obj.to_text()
    return "".join(block.to_text() for block in obj)


def encode_msg(obj: Encodable) -> bytes:
    return encode_blocks(obj).encode(ENCODING)


__all__ = [
    "BLOCK_START",
    "BLOCK_NAME",
    "ITEM_LINE",
    "decode_hex",
    "parse_blocks",
    "decode_msg",
    "encode_blocks",
    "encode_msg",
]
