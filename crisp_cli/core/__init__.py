"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for the plugin endpoint payloads
- Low-level HTTP client with auth, envelope decoding and error handling
"""

from crisp_cli.core.client import APIClient, APIError, CrispError, DecodeError, Response, TransportError
from crisp_cli.core.types import (
    PluginInformation,
    PluginPersonalRank,
    PluginStars,
    parse_string_list,
    unwrap_envelope,
)

__all__ = [
    "APIClient",
    "APIError",
    "CrispError",
    "DecodeError",
    "PluginInformation",
    "PluginPersonalRank",
    "PluginStars",
    "Response",
    "TransportError",
    "parse_string_list",
    "unwrap_envelope",
]
