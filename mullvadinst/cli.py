"""Command entry point: confirm, remove, fetch and install."""

from __future__ import annotations

import os
import signal
import sys
import time
from collections.abc import Sequence

from . import arch, github, log
from .config import parse_flags
from .github import Release, ReleaseError
from .installer import install
from .prompts import UI, spinner
from .remove import remove
from .tmpdirs import install_signal_handlers
from .wizard import Wizard

FETCH_TIMEOUT = 10.0
FETCH_RETRIES = 3
FETCH_BACKOFF = 0.5
SPINNER_DOTS = 3
SPINNER_REFRESH = 0.2


def fetch_release(ui: UI, channel: str) -> Release:
    """Fetch the newest release of ``channel``, retrying within a time limit."""
    ui.run_all(spinner("Fetching releases", SPINNER_DOTS, SPINNER_REFRESH))

    deadline = time.monotonic() + FETCH_TIMEOUT
    last_error: ReleaseError | None = None
    for _ in range(FETCH_RETRIES):
        if time.monotonic() >= deadline:
            break
        try:
            return github.get_latest_release(channel)
        except ReleaseError as exc:
            last_error = exc
            time.sleep(FETCH_BACKOFF)
    if time.monotonic() >= deadline:
        raise ReleaseError("fetch timeout exceeded")
    raise ReleaseError(f"all retries failed: {last_error}") from last_error


def run(argv: Sequence[str] | None = None) -> None:
    """Carry out one installer run; raise on failure."""
    cfg = parse_flags(argv)
    log.init_logger(cfg.no_color)

    if os.geteuid() != 0:
        log.info("--help")
        raise PermissionError("Need to be root")

    ui = UI(sys.stdin, sys.stdout, sys.stderr, cfg.assume_yes, cfg.dry_run, cfg.no_color)

    try:
        user = Wizard(cfg).run(ui)
    except (OSError, ValueError, EOFError) as exc:
        raise RuntimeError(f"confirmation: {exc}") from exc
    if not user.confirmed:
        log.info("Aborted by user")
        return

    if user.do_remove:
        log.info("Removing previous installation…")
        try:
            remove(cfg)
        except OSError as exc:
            raise RuntimeError(f"remove: {exc}") from exc
        log.info("Old installation removed")

    os_info = arch.detect()

    try:
        release = fetch_release(ui, user.channel)
    except ReleaseError as exc:
        raise RuntimeError(f"fetch release: {exc}") from exc
    log.info("Selected release:", release.tag)

    log.info("Installing…")
    try:
        install(release, os_info, cfg, ui, user.use_system_xz)
    except Exception as exc:
        raise RuntimeError(f"install: {exc}") from exc
    log.info("Installation complete")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the installer, printing any error and exiting with status 1."""
    previous = install_signal_handlers()
    try:
        run(argv)
    except Exception as exc:
        log.fatal(exc)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
    return 0


if __name__ == "__main__":
    sys.exit(main())