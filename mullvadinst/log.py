"""Console logging helpers with optional colour output."""

from __future__ import annotations

import sys
from collections.abc import Iterable

RESET = "\x1b[0m"

BLUE = "\x1b[38;2;138;173;244m"
TEAL = "\x1b[38;2; 139;212;202m"
YELLOW = "\x1b[38;2;229;200;144m"
PINK = "\x1b[38;2;245;189;230m"
GRAY = "\x1b[38;2;202;211;245m"
GREEN = "\x1b[38;2;166;218;149m"
TEXT = "\x1b[38;2;244;219;214m"
RED = "\x1b[38;2;231;130;132m"

MSG_WELCOME = "=== Welcome to Mullvad VPN Installer ==="
MSG_SELECT_CHANNEL = "Select release channel:"
MSG_CONFIRM_ACTION = 'Proceed to %s with channel "%s"?'
MSG_REMOVE_OLD = "Remove old installation first?"
MSG_SELECT_XZ_BACKEND = "Select XZ backend:"
MSG_INVALID_YES_NO = "Please answer yes or no."
MSG_INVALID_CHOICE = "Please select a valid option."
OPT_STABLE = "stable"
OPT_BETA = "beta"

_no_color = False


def init_logger(disable_color: bool) -> None:
    """Turn colour output off or on for all log functions."""
    global _no_color
    _no_color = bool(disable_color)


def no_color() -> bool:
    """Return True when colour output is disabled."""
    return _no_color


def _sprint(args: Iterable[object]) -> str:
    """Join values, adding a space only between two adjacent non-strings."""
    parts: list[str] = []
    prev_is_str = True
    for index, value in enumerate(args):
        is_str = isinstance(value, str)
        if index and not is_str and not prev_is_str:
            parts.append(" ")
        parts.append(str(value))
        prev_is_str = is_str
    return "".join(parts)


def _emit(prefix: str, color: str, args: tuple[object, ...]) -> None:
    head = prefix if _no_color else f"{color}{prefix}{RESET}"
    print(head, _sprint(args), RESET, file=sys.stdout, flush=True)


def hi(*args: object) -> None:
    """Print the welcome banner."""
    _emit(MSG_WELCOME, TEXT, args)


def info(*args: object) -> None:
    """Print an informational message."""
    _emit("INFO: ", GREEN, args)


def warn(*args: object) -> None:
    """Print a warning."""
    _emit("WARN: ", YELLOW, args)


def fatal(*args: object) -> None:
    """Print an error and exit with status 1."""
    _emit("ERROR: ", RED, args)
    raise SystemExit(1)


def _info_prefix() -> str:
    return "INFO: " if _no_color else f"{GREEN}INFO:{RESET} "


def progress(read: int, total: int, elapsed: float) -> None:
    """Redraw the download progress line; ``elapsed`` is in seconds."""
    mb_read = read / 1024 / 1024
    mb_total = total / 1024 / 1024
    speed = mb_read / elapsed if elapsed > 0 else 0.0
    sys.stdout.write(
        f"\r{_info_prefix()}Downloading… {mb_read:.2f}/{mb_total:.2f} MB "
        f"({speed:.2f} MB/s){RESET}"
    )
    sys.stdout.flush()


def finish_progress(read: int, total: int, elapsed: float) -> None:
    """Print the final download summary; ``elapsed`` is in seconds."""
    avg_kb = read / 1024 / elapsed if elapsed > 0 else 0.0
    sys.stdout.write(
        f" {_info_prefix()}Downloaded {read}/{total} bytes (avg {avg_kb:.1f} KB/s){RESET}\n"
    )
    sys.stdout.flush()