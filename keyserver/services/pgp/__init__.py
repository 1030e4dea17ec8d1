"""OpenPGP key material handling."""
from keyserver.services.pgp.parser import ParsedKey, ParsedUserId, parse_key

__all__ = ["ParsedKey", "ParsedUserId", "parse_key"]
