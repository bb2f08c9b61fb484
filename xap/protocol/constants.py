"""Protocol-wide constants shared by the codec and the connection."""

ENCODING = "utf-8"
DEFAULT_PORT = 3639
DEFAULT_ADDRESS = "127.0.0.1"
SUPPORTED_VERSIONS = (12, 13)
HEADER_VERSION = 13
DEFAULT_HOP = 1

HEADER_BLOCK_NAME = "xap-header"
HEARTBEAT_BLOCK_NAME = "xap-hbeat"
HEARTBEAT_CLASS_PREFIX = "xap-hbeat."

HEADER_REQUIRED_ITEMS = ("v", "hop", "uid", "class", "source")
HEADER_OPTIONAL_ITEMS = ("target",)
HEADER_ITEMS = HEADER_REQUIRED_ITEMS + HEADER_OPTIONAL_ITEMS

HEARTBEAT_REQUIRED_ITEMS = HEADER_REQUIRED_ITEMS + ("interval",)
HEARTBEAT_OPTIONAL_ITEMS = ("port", "pid")
HEARTBEAT_ITEMS = HEARTBEAT_REQUIRED_ITEMS + HEARTBEAT_OPTIONAL_ITEMS

DEFAULT_HEARTBEAT_INTERVAL = 60  # seconds
TICK_INTERVAL_MS = 1000
FAST_HEARTBEAT_MS = 1000
HEARTBEAT_BACKOFF = 2.0

__all__ = [
    "ENCODING",
    "DEFAULT_PORT",
    "DEFAULT_ADDRESS",
    "SUPPORTED_VERSIONS",
    "HEADER_VERSION",
    "DEFAULT_HOP",
    "HEADER_BLOCK_NAME",
    "HEARTBEAT_BLOCK_NAME",
    "HEARTBEAT_CLASS_PREFIX",
    "HEADER_REQUIRED_ITEMS",
    "HEADER_OPTIONAL_ITEMS",
    "HEADER_ITEMS",
    "HEARTBEAT_REQUIRED_ITEMS",
    "HEARTBEAT_OPTIONAL_ITEMS",
    "HEARTBEAT_ITEMS",
    "DEFAULT_HEARTBEAT_INTERVAL",
    "TICK_INTERVAL_MS",
    "FAST_HEARTBEAT_MS",
    "HEARTBEAT_BACKOFF",
]
