"""Launch the user's interactive editor on a local file."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"


class EditorError(Exception):
    """Raised when the editor cannot be started or exits abnormally."""


def get_editor(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the editor command from ``$VISUAL`` or ``$EDITOR`` (default ``vi``).

    The value is split shell-style so settings like ``code --wait`` work.
    """
    env = os.environ if environ is None else environ
    command = env.get("VISUAL") or env.get("EDITOR") or DEFAULT_EDITOR
    argv = shlex.split(command)
    return argv or [DEFAULT_EDITOR]


def open_in_editor(path: str | Path, editor: list[str] | None = None) -> None:
    """Open *path* in the editor and block until it exits.

    The editor inherits this process's stdin, stdout and stderr.

    Raises:
        EditorError: If the editor is not found or exits with a non-zero status.
    """
    argv = [*(editor or get_editor()), str(path)]
    logger.debug("running editor: %s", shlex.join(argv))
    try:
        subprocess.run(argv, check=True)
    except FileNotFoundError as exc:
        raise EditorError(f"Editor {argv[0]!r} not found") from exc
    except subprocess.CalledProcessError as exc:
        raise EditorError(
            f"Editor {argv[0]!r} exited with status {exc.returncode}"
        ) from exc
    except OSError as exc:
        raise EditorError(f"Could not run editor {argv[0]!r}: {exc}") from exc
