"""
Protocol package that centralizes block models, the wire codec, header/heartbeat
validation and the error taxonomy shared by every xAP endpoint.
"""

from .blocks import Block, BlockItem, BlockKind, HeartbeatClass, build_header, build_heartbeat
from .constants import DEFAULT_ADDRESS, DEFAULT_PORT, ENCODING, HEADER_BLOCK_NAME, HEARTBEAT_BLOCK_NAME
from .errors import (
    DuplicateKey,
    EmptyName,
    ErrorCode,
    IncompleteMessage,
    InvalidFieldValue,
    MissingRequiredField,
    NotConnected,
    ParseFailure,
    ProtocolError,
    StatusCode,
    TransportError,
)
from .fields import HeaderFields, HeartbeatFields
from .framing import decode_hex, decode_msg, encode_blocks, encode_msg, parse_blocks
from .messages import Message
from .validator import (
    load_schema,
    parse_header_fields,
    parse_heartbeat_fields,
    validate_header_fields,
    validate_heartbeat_fields,
)

__all__ = [
    "Block",
    "BlockItem",
    "BlockKind",
    "HeartbeatClass",
    "build_header",
    "build_heartbeat",
    "DEFAULT_ADDRESS",
    "DEFAULT_PORT",
    "ENCODING",
    "HEADER_BLOCK_NAME",
    "HEARTBEAT_BLOCK_NAME",
    "ErrorCode",
    "StatusCode",
    "ProtocolError",
    "EmptyName",
    "DuplicateKey",
    "MissingRequiredField",
    "InvalidFieldValue",
    "IncompleteMessage",
    "NotConnected",
    "TransportError",
    "ParseFailure",
    "HeaderFields",
    "HeartbeatFields",
    "decode_hex",
    "decode_msg",
    "encode_blocks",
    "encode_msg",
    "parse_blocks",
    "Message",
    "load_schema",
    "parse_header_fields",
    "parse_heartbeat_fields",
    "validate_header_fields",
    "validate_heartbeat_fields",
]
