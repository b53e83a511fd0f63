"""Data models for ssmedit."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

PARAMETER_TYPES = ("String", "SecureString", "StringList")
ParameterType = Literal["String", "SecureString", "StringList"]

STANDARD_TIER = "Standard"
ADVANCED_TIER = "Advanced"
ParameterTier = Literal["Standard", "Advanced"]

# Largest value (in bytes) the Standard tier accepts.
STANDARD_TIER_MAX_BYTES = 4096


class Format(str, Enum):
    """How a parameter value should be interpreted and validated."""

    JSON = "json"
    YAML = "yaml"
    ENV = "env"
    TEXT = "text"


@dataclass
class Parameter:
    """A single SSM Parameter Store parameter, as fetched with its value."""

    name: str              # full SSM name, e.g. /app/prod/config
    value: str
    type: ParameterType    # "String" | "SecureString" | "StringList"
    version: int
    last_modified: datetime | None = None
    tier: str | None = None

    def __post_init__(self) -> None:
        if self.type not in PARAMETER_TYPES:
            raise ValueError(
                f"Invalid parameter type {self.type!r}; "
                f"expected one of {PARAMETER_TYPES}"
            )

    @property
    def is_secure(self) -> bool:
        return self.type == "SecureString"


@dataclass
class ParameterSummary:
    """Metadata row returned by a listing (no value)."""

    name: str
    type: str
    version: int
    last_modified: datetime | None = None


def choose_tier(value: str | bytes) -> ParameterTier:
    """Return the storage tier needed to hold *value*.

    Content larger than :data:`STANDARD_TIER_MAX_BYTES` (measured in UTF-8
    bytes) needs the Advanced tier.
    """
    size = len(value.encode("utf-8")) if isinstance(value, str) else len(value)
    if size > STANDARD_TIER_MAX_BYTES:
        return ADVANCED_TIER
    return STANDARD_TIER
