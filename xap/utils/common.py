from __future__ import annotations

import zlib
from typing import NamedTuple


class SourceAddress(NamedTuple):
    vendor: str
    device: str
    instance: str
    subdevice: str = ""


def parse_source(source: str) -> SourceAddress:
    """Split ``vendor.device.instance[:subdevice]`` into its parts."""
    address, _, subdevice = source.partition(":")
    parts = address.split(".")
    vendor = parts[0]
    device = parts[1] if len(parts) > 1 else ""
    instance = ".".join(parts[2:])
    return SourceAddress(vendor, device, instance, subdevice)


def _source_checksum(source: str) -> int:
    # the sub-device part never contributes to the device identifier
    device_address = source.partition(":")[0]
    return zlib.crc32(device_address.encode("utf-8")) & 0xFFFFFFFF


def generate_short_id(source: str) -> str:
    """v1.2 style identifier such as ``FF123400``."""
    return f"FF{_source_checksum(source) & 0xFFFF:04X}00"


def generate_extended_id(source: str, device_digits: int = 8, sub_digits: int = 4) -> str:
    """v1.3 style identifier such as ``FF.12345678:0000``."""
    device = f"{_source_checksum(source):0{device_digits}X}"[-device_digits:]
    return f"FF.{device}:{'0' * sub_digits}"


def generate_uid(version: str, source: str) -> str:
    if version == "v13":
        return generate_extended_id(source)
    return generate_short_id(source)


__all__ = ["SourceAddress", "parse_source", "generate_short_id", "generate_extended_id", "generate_uid"]
