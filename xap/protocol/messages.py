from __future__ import annotations

from typing import Iterable, List, Optional

from .blocks import Block
from .errors import IncompleteMessage
from .fields import HeaderFields
from .validator import parse_header_fields


class Message:
    """A header block followed by one or more payload blocks."""

    def __init__(self, header: Block, body: Block) -> None:
        self.blocks: List[Block] = [header, body]
        self.header: Optional[HeaderFields] = parse_header_fields(header)
        self.original_text: Optional[str] = None

    @classmethod
    def from_blocks(cls, blocks: Iterable[Block]) -> "Message":
        blocks = list(blocks)
        if len(blocks) < 2:
            raise IncompleteMessage()
        msg = cls(blocks[0], blocks[1])
        for block in blocks[2:]:
            msg.add(block)
        return msg

    def add(self, block: Block) -> None:
        self.blocks.append(block)

    @property
    def source(self) -> Optional[str]:
        return self.header.source if self.header else None

    @property
    def msg_class(self) -> Optional[str]:
        return self.header.msg_class if self.header else None

    @property
    def body(self) -> List[Block]:
        return self.blocks[1:]

    def get_block_value(self, index: int, key: str) -> Optional[str]:
        return self.blocks[index].get_value(key)

    def get_header_value(self, key: str) -> Optional[str]:
        return self.get_block_value(0, key)

    def get_first_block_value(self, key: str) -> Optional[str]:
        return self.get_block_value(1, key)

    def to_text(self) -> str:
        return "".join(block.to_text() for block in self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __str__(self) -> str:
        return self.to_text()


__all__ = ["Message"]
