"""Removal of an existing installation and its service."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from contextlib import suppress

from . import initsys, log
from .config import Config
from .initsys import InitSystem

SERVICE_NAME = "mullvad-daemon"

ADDITIONAL_PATHS = (
    "/usr/share/bash-completion/completions/mullvad",
    "/usr/share/icons/hicolor/32x32/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/48x48/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/64x64/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/128x128/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/256x256/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/512x512/apps/mullvad-vpn.png",
    "/usr/share/icons/hicolor/1024x1024/apps/mullvad-vpn.png",
    "/usr/share/fish/vendor_completions.d/mullvad.fish",
    "/usr/share/doc/mullvad-vpn",
    "/usr/share/applications/mullvad-vpn.desktop",
    "/usr/local/share/zsh/site-functions/_mullvad",
    "/usr/bin/mullvad",
    "/usr/bin/mullvad-daemon",
    "/usr/bin/mullvad-exclude",
    "/usr/bin/mullvad-problem-report",
    "/opt/Mullvad VPN",
)


def run_cmd(name: str, *args: str) -> subprocess.CompletedProcess:
    """Run a command with inherited output; raise if it fails."""
    return subprocess.run([name, *args], check=True)


def _try_cmd(name: str, *args: str) -> None:
    with suppress(OSError, subprocess.SubprocessError):
        run_cmd(name, *args)


def _try_remove(path: str) -> None:
    with suppress(OSError):
        os.remove(path)


def _remove_all(path: str) -> None:
    """Remove a file, link or directory tree; a missing path is not an error."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        pass


def _try_remove_all(path: str) -> None:
    with suppress(OSError):
        _remove_all(path)


def _stop_systemd() -> None:
    unit = f"{SERVICE_NAME}.service"
    _try_cmd("systemctl", "stop", unit)
    _try_cmd("systemctl", "disable", unit)
    _try_remove(f"/etc/systemd/system/{unit}")
    _try_cmd("systemctl", "daemon-reload")


def _stop_runit() -> None:
    _try_cmd("sv", "stop", SERVICE_NAME)
    _try_remove(f"/var/service/{SERVICE_NAME}")
    _try_remove_all(f"/etc/sv/{SERVICE_NAME}")


def _stop_sysv() -> None:
    script = f"/etc/init.d/{SERVICE_NAME}"
    _try_cmd(script, "stop")
    _try_remove(script)


def _stop_openrc() -> None:
    _try_cmd("rc-service", SERVICE_NAME, "stop")
    _try_cmd("rc-update", "del", SERVICE_NAME, "default")
    _try_remove(f"/etc/init.d/{SERVICE_NAME}")


def _stop_s6() -> None:
    _try_remove_all(f"/etc/s6/{SERVICE_NAME}")
    _try_remove(f"/var/service/{SERVICE_NAME}")


def _stop_dinit() -> None:
    _try_cmd("dinitctl", "stop", SERVICE_NAME)
    _try_remove(f"/etc/dinit.d/{SERVICE_NAME}")
    _try_cmd("dinitctl", "reload")


_SERVICE_STEPS: dict[InitSystem, tuple[str, Callable[[], None]]] = {
    InitSystem.SYSTEMD: ("Detected systemd → stopping and disabling Mullvad service", _stop_systemd),
    InitSystem.RUNIT: ("Detected runit → stopping Mullvad service", _stop_runit),
    InitSystem.SYSV: ("Detected SysV init → stopping and removing init.d script", _stop_sysv),
    InitSystem.OPENRC: ("Detected OpenRC → stopping and removing service", _stop_openrc),
    InitSystem.S6: ("Detected s6 → removing service directory", _stop_s6),
    InitSystem.DINIT: ("Detected dinit → stopping and removing service", _stop_dinit),
}


def remove(cfg: Config) -> None:
    """Stop the service and delete every installed file."""
    init_sys = initsys.detect()
    step = _SERVICE_STEPS.get(init_sys)
    if step is None:
        log.info("Unknown init system → skipping service stop/removal")
    else:
        message, stop = step
        log.info(message)
        if not cfg.dry_run:
            stop()

    for path in ADDITIONAL_PATHS:
        log.info("Removing ", path)
        if cfg.dry_run:
            log.info("  (dry-run) skipping")
            continue
        try:
            _remove_all(path)
        except OSError as exc:
            raise OSError(exc.errno, f'failed to remove "{path}": {exc.strerror}', path) from exc

    log.info("Uninstallation complete.")