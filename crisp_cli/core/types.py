"""
Core types for the Crisp plugin endpoints.

Every field is optional: the API omits unset fields, and an absent field is
kept distinct from a zero value.
"""

from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Any, TypeVar

T = TypeVar("T")


# =============================================================================
# Envelope
# =============================================================================


def unwrap_envelope(payload: Any, parser: Callable[[Any], T]) -> T | None:
    """
    Unwrap a {"data": ...} response envelope.

    Args:
        payload: Decoded JSON response body
        parser: Function building the result from the "data" field

    Returns:
        Parsed payload, or None when "data" is absent or null

    Raises:
        TypeError: If the payload is not a JSON object

    """
    if not isinstance(payload, dict):
        raise TypeError(f"expected a JSON object envelope, got {type(payload).__name__}")
    data = payload.get("data")
    if data is None:
        return None
    return parser(data)


def _expect_object(data: Any, name: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"expected a JSON object for {name}, got {type(data).__name__}")
    return data


def _omit_none(obj: Any) -> dict[str, Any]:
    return {f.name: getattr(obj, f.name) for f in fields(obj) if getattr(obj, f.name) is not None}


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"expected a string for {key!r}, got {type(value).__name__}")
    return value


def _optional_uint(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer for {key!r}, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"expected a non-negative integer for {key!r}, got {value}")
    return value


def _optional_string_list(data: dict[str, Any], key: str) -> list[str] | None:
    value = data.get(key)
    return parse_string_list(value) if value is not None else None


def parse_string_list(data: Any) -> list[str]:
    """Parse a JSON array of strings, keeping order."""
    if not isinstance(data, list):
        raise TypeError(f"expected a JSON array, got {type(data).__name__}")
    for item in data:
        if not isinstance(item, str):
            raise TypeError(f"expected an array of strings, found {type(item).__name__}")
    return list(data)


# =============================================================================
# Plugin Types
# =============================================================================


@dataclass(frozen=True)
class PluginInformation:
    """Public information about a plugin."""

    id: str | None = None
    urn: str | None = None
    type: str | None = None
    name: str | None = None
    description: str | None = None
    features: list[str] | None = None
    showcase: list[str] | None = None
    price: int | None = None
    color: str | None = None
    icon: str | None = None
    banner: str | None = None
    since: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "PluginInformation":
        """Create from API response dict."""
        data = _expect_object(data, "plugin information")
        return cls(
            id=_optional_str(data, "id"),
            urn=_optional_str(data, "urn"),
            type=_optional_str(data, "type"),
            name=_optional_str(data, "name"),
            description=_optional_str(data, "description"),
            features=_optional_string_list(data, "features"),
            showcase=_optional_string_list(data, "showcase"),
            price=_optional_uint(data, "price"),
            color=_optional_str(data, "color"),
            icon=_optional_str(data, "icon"),
            banner=_optional_str(data, "banner"),
            since=_optional_str(data, "since"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, omitting absent fields."""
        return _omit_none(self)


@dataclass(frozen=True)
class PluginStars:
    """Aggregate user rating of a plugin."""

    mean: int | None = None
    total: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "PluginStars":
        """Create from API response dict.

        Accepts both {"stars": {"mean", "total"}} and a flat {"mean", "total"}.
        """
        data = _expect_object(data, "plugin stars")
        if "stars" in data:
            stars = data["stars"]
            data = _expect_object(stars, "plugin stars") if stars is not None else {}
        return cls(mean=_optional_uint(data, "mean"), total=_optional_uint(data, "total"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, omitting absent fields."""
        return _omit_none(self)


@dataclass(frozen=True)
class PluginPersonalRank:
    """Rank given to a plugin by the calling identity."""

    rank: int | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "PluginPersonalRank":
        """Create from API response dict."""
        data = _expect_object(data, "plugin rank")
        return cls(rank=_optional_uint(data, "rank"))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return _omit_none(self)
