"""External editor support: command splitting and temp-file capture."""

from __future__ import annotations

import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Mapping, Optional, Sequence

from loguru import logger

from .errors import EditorCommandError

EDITOR_ENV_VARS = ("VISUAL", "EDITOR", "JOT_EDITOR")

_ESCAPABLE = frozenset('"\'\\')


def split_command(command: str) -> list[str]:
    """Split an editor command string into argv.

    Quoting is POSIX-ish: single quotes are literal, double quotes group,
    and a backslash outside single quotes escapes whitespace, a quote, or
    another backslash (anything at all inside double quotes). Other
    backslashes are kept, so ``C:\\tools\\vim.exe`` survives.

    Raises:
        EditorCommandError: On an unterminated quote
    """
    args: list[str] = []
    current: list[str] = []
    in_single = False
    in_double = False
    have_arg = False

    chars = command.strip()
    i = 0
    while i < len(chars):
        ch = chars[i]
        if ch == "\\" and not in_single and i + 1 < len(chars):
            nxt = chars[i + 1]
            if in_double or nxt.isspace() or nxt in _ESCAPABLE:
                current.append(nxt)
                have_arg = True
                i += 2
                continue
        if ch == "'" and not in_double:
            in_single = not in_single
            have_arg = True
        elif ch == '"' and not in_single:
            in_double = not in_double
            have_arg = True
        elif ch.isspace() and not in_single and not in_double:
            if have_arg:
                args.append("".join(current))
                current = []
                have_arg = False
        else:
            current.append(ch)
            have_arg = True
        i += 1

    if in_single or in_double:
        raise EditorCommandError(f"unterminated quote in editor command: {command}")

    if have_arg:
        args.append("".join(current))
    return args


def quote_arg(arg: str) -> str:
    """Quote one argument so split_command returns it unchanged."""
    if arg and not any(ch.isspace() or ch in "'\"\\" for ch in arg):
        return arg
    return "'" + arg.replace("'", "'\\''") + "'"


def join_command(argv: Sequence[str]) -> str:
    """Inverse of split_command."""
    return " ".join(quote_arg(arg) for arg in argv)


def default_editor() -> str:
    return "notepad" if sys.platform == "win32" else "vi"


def resolve_editor(configured: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> str:
    """Pick the editor command string.

    A configured command wins, then the first set of VISUAL, EDITOR,
    JOT_EDITOR, then the platform default.
    """
    if configured:
        return configured
    environ = os.environ if environ is None else environ
    for var in EDITOR_ENV_VARS:
        value = environ.get(var, "").strip()
        if value:
            return value
    return default_editor()


def capture_with_editor(command: str, initial: str = "", suffix: str = ".txt") -> str:
    """Open ``command`` on a temp file and return what the user saved.

    The temp file is created 0600 and removed on every exit path.

    Raises:
        EditorCommandError: If the command is malformed, empty, or exits non-zero
        OSError: If the editor cannot be launched
    """
    argv = split_command(command)
    if not argv:
        raise EditorCommandError("editor command is empty")

    fd, name = tempfile.mkstemp(prefix="jot-", suffix=suffix)
    path = Path(name)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(initial)

        logger.debug("launching editor: {}", argv + [name])
        result = subprocess.run(argv + [name], check=False)
        if result.returncode != 0:
            raise EditorCommandError(f"editor exited with status {result.returncode}")

        return path.read_text(encoding="utf-8")
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
