from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import jsonschema
from dotenv import load_dotenv

from xap.protocol import DEFAULT_ADDRESS, DEFAULT_PORT, validator
from xap.utils import generate_uid

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_V12: Dict[str, Any] = {
    "version": "v12",
    "source": {"vendor": "vendor", "device": "device", "instance": "instance"},
    "hb_interval": 60,
    "uid": None,
    "rx_address": DEFAULT_ADDRESS,
    "tx_address": DEFAULT_ADDRESS,
    "port": DEFAULT_PORT,
    "loopback": False,
}

DEFAULT_CONFIG_V13: Dict[str, Any] = {**copy.deepcopy(DEFAULT_CONFIG_V12), "version": "v13"}

# Environment variable -> (option path, type)
ENV_OPTIONS: Dict[str, tuple] = {
    "XAP_VERSION": (("version",), str),
    "XAP_VENDOR": (("source", "vendor"), str),
    "XAP_DEVICE": (("source", "device"), str),
    "XAP_INSTANCE": (("source", "instance"), str),
    "XAP_HB_INTERVAL": (("hb_interval",), int),
    "XAP_UID": (("uid",), str),
    "XAP_RX_ADDRESS": (("rx_address",), str),
    "XAP_TX_ADDRESS": (("tx_address",), str),
    "XAP_PORT": (("port",), int),
    "XAP_LOOPBACK": (("loopback",), bool),
    "XAP_LOG_LEVEL": (("log_level",), str),
}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class ConnectionConfig:
    """Fully resolved connection options."""

    version: str
    vendor: str
    device: str
    instance: str
    hb_interval: int
    uid: str
    rx_address: str
    tx_address: str
    port: int
    loopback: bool

    @property
    def source(self) -> str:
        return f"{self.vendor}.{self.device}.{self.instance}"


def _validate_options(options: Mapping[str, Any]) -> None:
    schema = validator.load_schema("options")
    try:
        jsonschema.validate(instance=dict(options), schema=schema, format_checker=jsonschema.FormatChecker())
    except jsonschema.ValidationError as exc:
        path = ".".join(str(part) for part in exc.absolute_path) or "options"
        raise ConfigError(f"Invalid connection option {path}: {exc.message}") from exc


def resolve_config(options: Optional[Mapping[str, Any]] = None) -> ConnectionConfig:
    """Merge caller options over the defaults for the requested version."""
    options = options or {}
    _validate_options(options)

    defaults = DEFAULT_CONFIG_V12 if options.get("version") == "v12" else DEFAULT_CONFIG_V13
    merged = copy.deepcopy(defaults)
    for key, value in options.items():
        if key == "source":
            merged["source"].update({k: v for k, v in value.items() if v})
        elif value is not None:
            merged[key] = value

    source = merged["source"]
    source_text = f"{source['vendor']}.{source['device']}.{source['instance']}"
    uid = merged["uid"] or generate_uid(merged["version"], source_text)
    return ConnectionConfig(
        version=merged["version"],
        vendor=source["vendor"],
        device=source["device"],
        instance=source["instance"],
        hb_interval=int(merged["hb_interval"]),
        uid=uid,
        rx_address=merged["rx_address"],
        tx_address=merged["tx_address"],
        port=int(merged["port"]),
        loopback=bool(merged["loopback"]),
    )


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Build an options mapping from the ``XAP_*`` environment variables."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    options: Dict[str, Any] = {}
    for env_key, (path, target_type) in ENV_OPTIONS.items():
        value = os.getenv(env_key)
        if value is None:
            continue
        node = options
        for part in path[:-1]:
            node = node.setdefault(part, {})
        node[path[-1]] = _coerce_type(value, target_type)
        logger.debug("Option %s taken from %s", ".".join(path), env_key)
    return options


def _coerce_type(value: Any, target_type: type) -> Any:
    if isinstance(value, target_type):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value} to {target_type}") from exc


__all__ = [
    "DEFAULT_CONFIG_V12",
    "DEFAULT_CONFIG_V13",
    "ConfigError",
    "ConnectionConfig",
    "load_config",
    "resolve_config",
]
