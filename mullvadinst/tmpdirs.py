"""Registry of temporary directories removed on interrupt or termination."""

from __future__ import annotations

import shutil
import signal
import threading
from typing import Any

_lock = threading.Lock()
_dirs: list[str] = []


def register_tmp_dir(path: str) -> None:
    """Remember ``path`` so that an interrupted run still removes it."""
    with _lock:
        _dirs.append(str(path))


def unregister_tmp_dir(path: str) -> None:
    """Forget the first registration of ``path``, if there is one."""
    with _lock:
        try:
            _dirs.remove(str(path))
        except ValueError:
            pass


def cleanup_all() -> None:
    """Remove every registered directory and clear the registry."""
    with _lock:
        for path in _dirs:
            shutil.rmtree(path, ignore_errors=True)
        _dirs.clear()


def _handle_signal(signum: int, frame: Any) -> None:
    cleanup_all()
    raise SystemExit(1)


def install_signal_handlers() -> dict[int, Any]:
    """Clean up and exit with status 1 on SIGINT or SIGTERM.

    Returns the handlers that were replaced, keyed by signal number.
    """
    return {
        sig: signal.signal(sig, _handle_signal)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }