from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .blocks import Block
from .constants import (
    HEADER_OPTIONAL_ITEMS,
    HEADER_REQUIRED_ITEMS,
    HEARTBEAT_OPTIONAL_ITEMS,
    HEARTBEAT_REQUIRED_ITEMS,
)
from .errors import InvalidFieldValue, MissingRequiredField, ProtocolError
from .fields import HeaderFields, HeartbeatFields

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent / "schemas"

FieldsT = TypeVar("FieldsT", bound=BaseModel)


@lru_cache(maxsize=16)
def load_schema(name: str) -> Optional[dict]:
    """Load a bundled JSON schema (``schemas/<name>.json``) if present."""
    path = SCHEMA_DIR / f"{name}.json"
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def _collect(block: Block, required: Iterable[str], optional: Iterable[str]) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for name in required:
        value = block.get_value(name)
        if value is None:
            raise MissingRequiredField(name)
        values[name] = value
    for name in optional:
        value = block.get_value(name)
        if value is not None:
            values[name] = value
    return values


def _build(model: Type[FieldsT], values: Dict[str, str]) -> FieldsT:
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "?"
        if field == "msg_class":
            field = "class"
        raise InvalidFieldValue(field, error["msg"]) from exc


def validate_header_fields(block: Block) -> HeaderFields:
    """Extract header items from ``block``; raise on the first problem."""
    values = _collect(block, HEADER_REQUIRED_ITEMS, HEADER_OPTIONAL_ITEMS)
    return _build(HeaderFields, values)


def validate_heartbeat_fields(block: Block) -> HeartbeatFields:
    """Extract heartbeat items from ``block``; raise on the first problem."""
    values = _collect(block, HEARTBEAT_REQUIRED_ITEMS, HEARTBEAT_OPTIONAL_ITEMS)
    return _build(HeartbeatFields, values)


def parse_header_fields(block: Block) -> Optional[HeaderFields]:
    try:
        return validate_header_fields(block)
    except ProtocolError as exc:
        logger.debug("Rejected header block %r: %s", block.name, exc)
        return None


def parse_heartbeat_fields(block: Block) -> Optional[HeartbeatFields]:
    try:
        return validate_heartbeat_fields(block)
    except ProtocolError as exc:
        logger.debug("Rejected heartbeat block %r: %s", block.name, exc)
        return None


__all__ = [
    "load_schema",
    "validate_header_fields",
    "validate_heartbeat_fields",
    "parse_header_fields",
    "parse_heartbeat_fields",
]
