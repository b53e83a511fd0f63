"""Edit, create and upload parameters through a validated editor loop.

The edit and create commands stage content in a scratch file, open it in the
user's editor and re-read it once the editor exits.  Content that fails format
validation sends the user straight back into the editor on the same file, for
as many rounds as it takes; only valid content is ever written to the store.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ssmedit.editor import open_in_editor
from ssmedit.formats import FormatError, detect_format, parse_format, validate_format
from ssmedit.models import ADVANCED_TIER, Format, ParameterSummary, choose_tier
from ssmedit.store import ParameterStore

logger = logging.getLogger(__name__)

# Called with each validation failure; returning False stops the loop.
InvalidCallback = Callable[[FormatError], bool | None]


class EditCancelled(Exception):
    """Raised when the user interrupts the edit loop before valid content is saved."""


class Outcome(str, Enum):
    COMMITTED = "committed"
    NOOP = "noop"


@dataclass
class EditResult:
    """What an edit, create or upload did to the store."""

    name: str
    outcome: Outcome
    format: Format
    attempts: int = 0
    version: int | None = None

    @property
    def committed(self) -> bool:
        return self.outcome is Outcome.COMMITTED


@contextmanager
def scratch_buffer(content: str = "", prefix: str = "ssm-edit-") -> Iterator[Path]:
    """Yield a temporary file seeded with *content*; it is removed on exit."""
    fd, name = tempfile.mkstemp(prefix=prefix)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove scratch file %s: %s", path, exc)


def _read_scratch(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as fh:
        return fh.read()


def _resolve_format(fmt: Format | str | None, seed: str | None) -> Format:
    if fmt:
        return parse_format(fmt)
    if seed is not None:
        detected = detect_format(seed)
        logger.info("Format not specified, detected %s", detected.value)
        return detected
    return Format.TEXT


def _edit_until_valid(
    path: Path, fmt: Format, on_invalid: InvalidCallback | None
) -> tuple[str, int]:
    """Run the editor on *path* until its content validates as *fmt*.

    Returns:
        The valid content and the number of editor invocations it took.

    Raises:
        EditCancelled: On ``KeyboardInterrupt`` or when *on_invalid* returns False.
    """
    attempts = 0
    try:
        while True:
            attempts += 1
            open_in_editor(path)
            candidate = _read_scratch(path)
            try:
                validate_format(candidate, fmt)
            except FormatError as exc:
                if on_invalid is None:
                    logger.warning("Validation failed (%s), reopening editor", exc)
                elif on_invalid(exc) is False:
                    raise EditCancelled(f"Edit cancelled after {attempts} attempt(s)") from exc
                continue
            return candidate, attempts
    except KeyboardInterrupt:
        raise EditCancelled(f"Edit interrupted after {attempts} attempt(s)") from None


def edit_parameter(
    store: ParameterStore,
    key: str,
    fmt: Format | str | None = None,
    on_invalid: InvalidCallback | None = None,
) -> EditResult:
    """Open the current value of *key* in the editor and save it back if it changed.

    When *fmt* is not given it is detected from the current value.  The write
    keeps the parameter's existing type and overwrites in place; unchanged
    content is never written, so the parameter version only moves on real edits.

    Raises:
        StoreError: If the fetch or the write fails.
        EditorError: If the editor fails to run.
        EditCancelled: If the user abandons the edit.
    """
    param = store.get(key, decrypt=True)
    resolved = _resolve_format(fmt, param.value)

    with scratch_buffer(param.value, prefix="ssm-edit-") as path:
        candidate, attempts = _edit_until_valid(path, resolved, on_invalid)

    if candidate == param.value:
        logger.info("No changes detected for %s", key)
        return EditResult(key, Outcome.NOOP, resolved, attempts, param.version)

    version = store.put(key, candidate, type=param.type, overwrite=True)
    return EditResult(key, Outcome.COMMITTED, resolved, attempts, version)


def create_parameter(
    store: ParameterStore,
    key: str,
    source: str | None = None,
    fmt: Format | str | None = None,
    on_invalid: InvalidCallback | None = None,
) -> EditResult:
    """Compose a new parameter in the editor and create it.

    The scratch file starts with the value of *source* when given (its format
    is detected if *fmt* is not), otherwise empty.  Without either a source or
    a format the content is not validated.  Values larger than the Standard
    tier limit are created in the Advanced tier.

    Raises:
        StoreError: If *source* cannot be fetched or *key* already exists.
        EditorError: If the editor fails to run.
        EditCancelled: If the user abandons the edit.
    """
    seed = None
    if source:
        seed = store.get(source, decrypt=True).value
    resolved = _resolve_format(fmt, seed)

    with scratch_buffer(seed or "", prefix="ssm-create-") as path:
        candidate, attempts = _edit_until_valid(path, resolved, on_invalid)

    version = store.put(
        key, candidate, type="String", overwrite=False, tier=choose_tier(candidate)
    )
    return EditResult(key, Outcome.COMMITTED, resolved, attempts, version)


def upload_parameter(
    store: ParameterStore,
    key: str,
    file_path: str | Path,
    fmt: Format | str | None = None,
) -> EditResult:
    """Write the contents of a local file to *key*, creating or overwriting it.

    With *fmt* given the file must validate first; there is no editor to
    retry in, so a :class:`FormatError` propagates.
    """
    with open(file_path, encoding="utf-8", newline="") as fh:
        content = fh.read()

    resolved = parse_format(fmt) if fmt else Format.TEXT
    validate_format(content, resolved)

    # Only ask for a tier when the value needs it; an existing Advanced
    # parameter cannot be moved back to Standard.
    tier = choose_tier(content)
    version = store.put(
        key,
        content,
        type="String",
        overwrite=True,
        tier=tier if tier == ADVANCED_TIER else None,
    )
    return EditResult(key, Outcome.COMMITTED, resolved, 0, version)


def get_parameter_value(store: ParameterStore, key: str) -> str:
    return store.get(key, decrypt=True).value


def delete_parameter(store: ParameterStore, key: str) -> None:
    store.delete(key)


def list_parameters(store: ParameterStore, prefix: str | None = None) -> list[ParameterSummary]:
    return store.list(prefix)
