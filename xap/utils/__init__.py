from .common import SourceAddress, generate_extended_id, generate_short_id, generate_uid, parse_source

__all__ = ["SourceAddress", "parse_source", "generate_short_id", "generate_extended_id", "generate_uid"]
