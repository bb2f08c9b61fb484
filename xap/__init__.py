"""xAP home automation protocol: blocks, wire codec, validation and identifiers."""

__version__ = "0.1.0"
