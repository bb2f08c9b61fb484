from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .constants import (
    DEFAULT_HEARTBEAT_INTERVAL,
    DEFAULT_HOP,
    HEADER_BLOCK_NAME,
    HEADER_ITEMS,
    HEADER_VERSION,
    HEARTBEAT_BLOCK_NAME,
    HEARTBEAT_CLASS_PREFIX,
    HEARTBEAT_ITEMS,
)
from .errors import DuplicateKey, EmptyName, InvalidFieldValue

ItemValue = Union[str, int, float, bool]


def format_value(value: ItemValue) -> str:
    """Wire text for an item value: ``true``/``false`` and ``1`` rather than ``1.0``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class BlockKind(StrEnum):
    """Tag selecting how a block is serialized."""

    GENERIC = "generic"
    HEADER = "header"
    HEARTBEAT = "heartbeat"


class HeartbeatClass(StrEnum):
    ALIVE = "alive"
    STOPPED = "stopped"


# Fixed item order per kind; generic blocks keep insertion order.
CANONICAL_ITEMS: Dict[BlockKind, Tuple[str, ...]] = {
    BlockKind.HEADER: HEADER_ITEMS,
    BlockKind.HEARTBEAT: HEARTBEAT_ITEMS,
}


@dataclass
class BlockItem:
    name: str
    value: str
    raw: Optional[bytes] = None

    @property
    def separator(self) -> str:
        return "!" if self.raw is not None else "="

    def to_line(self) -> str:
        return f"{self.name}{self.separator}{self.value}\n"


class Block:
    """Named, ordered collection of items with case-insensitively unique names."""

    def __init__(
        self,
        name: str,
        content: Optional[Mapping[str, ItemValue]] = None,
        kind: BlockKind = BlockKind.GENERIC,
    ) -> None:
        if not name:
            raise EmptyName()
        self.name = name
        self.kind = kind
        self.items: List[BlockItem] = []
        for key, value in (content or {}).items():
            self.add(key, value)

    def add(self, key: str, value: ItemValue) -> None:
        self.append_item(BlockItem(name=key, value=format_value(value)))

    def add_bytes(self, key: str, data: bytes) -> None:
        """Append an item carried as hex pairs on the wire (``key!0A1B``)."""
        self.append_item(BlockItem(name=key, value=data.hex().upper(), raw=bytes(data)))

    def append_item(self, item: BlockItem) -> None:
        if self.find(item.name) is not None:
            raise DuplicateKey(item.name)
        canonical = CANONICAL_ITEMS.get(self.kind)
        if canonical is not None and item.name.lower() not in canonical:
            raise InvalidFieldValue(item.name, f"not a {self.kind.value} item")
        self.items.append(item)

    def find(self, key: str) -> Optional[BlockItem]:
        key = key.lower()
        for item in self.items:
            if item.name.lower() == key:
                return item
        return None

    def get_value(self, key: str) -> Optional[str]:
        item = self.find(key)
        return item.value if item is not None else None

    def ordered_items(self) -> List[BlockItem]:
        canonical = CANONICAL_ITEMS.get(self.kind)
        if canonical is None:
            return list(self.items)
        ordered = (self.find(name) for name in canonical)
        return [item for item in ordered if item is not None]

    def to_text(self) -> str:
        body = "".join(item.to_line() for item in self.ordered_items())
        return f"{self.name}\n{{\n{body}}}\n"

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.find(key) is not None

    def __iter__(self) -> Iterator[BlockItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"Block(name={self.name!r}, kind={self.kind.value}, items={len(self.items)})"


def build_header(
    msg_class: str,
    uid: str,
    source: str,
    target: Optional[str] = None,
    subdevice_source: Optional[str] = None,
    subdevice_id: Optional[int] = None,
) -> Block:
    """Construct a ``xap-header`` block, optionally routed to a sub-device."""
    if subdevice_source:
        source = f"{source}:{subdevice_source}"
    if subdevice_id and subdevice_id > 0:
        device_part, _, sub_part = uid.partition(":")
        width = len(sub_part) if ":" in uid else 4
        uid = f"{device_part}:{format(subdevice_id, 'X').zfill(width)[-width:]}"

    header = Block(HEADER_BLOCK_NAME, kind=BlockKind.HEADER)
    header.add("v", HEADER_VERSION)
    header.add("hop", DEFAULT_HOP)
    header.add("uid", uid)
    header.add("class", msg_class)
    header.add("source", source)
    if target:
        header.add("target", target)
    return header


def build_heartbeat(
    hb_class: Union[HeartbeatClass, str],
    uid: str,
    source: str,
    interval: int = DEFAULT_HEARTBEAT_INTERVAL,
    port: Optional[int] = None,
) -> Block:
    """Construct a ``xap-hbeat`` block; ``port`` also stamps the process id."""
    hb_class = HeartbeatClass(hb_class)
    heartbeat = Block(HEARTBEAT_BLOCK_NAME, kind=BlockKind.HEARTBEAT)
    heartbeat.add("v", HEADER_VERSION)
    heartbeat.add("hop", DEFAULT_HOP)
    heartbeat.add("uid", uid)
    heartbeat.add("class", f"{HEARTBEAT_CLASS_PREFIX}{hb_class.value}")
    heartbeat.add("source", source)
    heartbeat.add("interval", interval)
    if port:
        heartbeat.add("port", port)
        heartbeat.add("pid", str(os.getpid()))
    return heartbeat


__all__ = [
    "ItemValue",
    "format_value",
    "BlockKind",
    "HeartbeatClass",
    "CANONICAL_ITEMS",
    "BlockItem",
    "Block",
    "build_header",
    "build_heartbeat",
]
