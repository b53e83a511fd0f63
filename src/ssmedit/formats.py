"""Detect and validate the format of parameter content."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

import yaml

from ssmedit.models import Format


class FormatErrorKind(str, Enum):
    INVALID_JSON = "invalid json"
    INVALID_YAML = "invalid yaml"
    INVALID_ENV = "invalid env"
    UNKNOWN_FORMAT = "unknown format"


class FormatError(Exception):
    """Raised when content does not conform to the requested format."""

    def __init__(self, kind: FormatErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        message = kind.value if not detail else f"{kind.value}: {detail}"
        super().__init__(message)


def _as_text(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


def _json_error(content: str | bytes) -> str | None:
    """Return a parse error description, or ``None`` when *content* is valid JSON."""
    try:
        json.loads(content, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        return f"line {exc.lineno} column {exc.colno}: {exc.msg}"
    except (ValueError, RecursionError) as exc:
        return str(exc) or type(exc).__name__
    return None


def _yaml_error(content: str | bytes) -> str | None:
    """Return an error description unless *content* decodes to a string-keyed mapping.

    Scalars and sequences are valid YAML but are rejected here: only mapping
    documents count as the ``yaml`` format.
    """
    try:
        data: Any = yaml.safe_load(content)
    except yaml.MarkedYAMLError as exc:
        mark = exc.problem_mark
        where = f"line {mark.line + 1} column {mark.column + 1}: " if mark else ""
        return f"{where}{exc.problem or exc}"
    # Constructors fail outside YAMLError on bad input: "2024-13-45" raises
    # ValueError, "!!bool x" KeyError, "!!timestamp x" AttributeError.
    except Exception as exc:
        return str(exc) or type(exc).__name__
    if not isinstance(data, dict):
        kind = "empty document" if data is None else type(data).__name__
        return f"expected a mapping, got {kind}"
    if not all(isinstance(key, str) for key in data):
        return "mapping keys must be strings"
    return None


def _env_error(content: str | bytes) -> str | None:
    """Return the first line without ``=``, ignoring empty lines and ``#`` comments.

    Only truly empty lines are skipped; a line of whitespace needs ``=`` too.
    """
    for lineno, line in enumerate(_as_text(content).split("\n"), start=1):
        if not line or line.lstrip().startswith("#"):
            continue
        if "=" not in line:
            return f"line {lineno} has no '='"
    return None


def parse_format(value: Format | str) -> Format:
    """Resolve a format tag case-insensitively.

    Raises:
        FormatError: with kind ``UNKNOWN_FORMAT`` for an unrecognised tag.
    """
    if isinstance(value, Format):
        return value
    try:
        return Format(str(value).strip().lower())
    except ValueError:
        raise FormatError(FormatErrorKind.UNKNOWN_FORMAT, repr(value)) from None


def detect_format(content: str | bytes) -> Format:
    """Guess the format of *content*.

    Checks run in order and the first match wins: any JSON document, then a
    YAML mapping, then ENV (every meaningful line contains ``=``), else text.
    Empty input is classified as ENV. Never raises.
    """
    if _json_error(content) is None:
        return Format.JSON
    if _yaml_error(content) is None:
        return Format.YAML
    if _env_error(content) is None:
        return Format.ENV
    return Format.TEXT


def validate_format(content: str | bytes, fmt: Format | str) -> None:
    """Check that *content* conforms to *fmt* (tag is case-insensitive).

    Raises:
        FormatError: describing the failed check.
    """
    fmt = parse_format(fmt)
    if fmt is Format.TEXT:
        return
    if fmt is Format.JSON:
        error, kind = _json_error(content), FormatErrorKind.INVALID_JSON
    elif fmt is Format.YAML:
        error, kind = _yaml_error(content), FormatErrorKind.INVALID_YAML
    else:
        error, kind = _env_error(content), FormatErrorKind.INVALID_ENV
    if error is not None:
        raise FormatError(kind, error)
