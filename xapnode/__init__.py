"""Connection runtime for xAP endpoints: configuration, UDP sockets and liveness."""

from .config import ConfigError, ConnectionConfig, load_config, resolve_config
from .core import ConnectionEvent, LinkPhase, XapConnection

__all__ = [
    "ConfigError",
    "ConnectionConfig",
    "load_config",
    "resolve_config",
    "ConnectionEvent",
    "LinkPhase",
    "XapConnection",
]
