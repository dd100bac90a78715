"""Detection of the running init system."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path


class InitSystem(str, Enum):
    SYSTEMD = "systemd"
    RUNIT = "runit"
    SYSV = "sysvinit"
    OPENRC = "openrc"
    S6 = "s6"
    DINIT = "dinit"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


_RUNIT_NAMES = frozenset({"runit", "runsvinit", "runsvdir"})


def detect(root: str | os.PathLike[str] = "/") -> InitSystem:
    """Guess the init system from PID 1 and well-known paths under ``root``."""
    base = Path(root)

    def under(path: str) -> Path:
        return base / path.lstrip("/")

    def has(path: str) -> bool:
        return under(path).exists()

    try:
        comm = under("/proc/1/comm").read_text(errors="replace").strip()
    except OSError:
        comm = ""
    try:
        exe_name = os.path.basename(os.readlink(under("/proc/1/exe")))
    except OSError:
        exe_name = ""

    if comm == "systemd":
        return InitSystem.SYSTEMD
    if _RUNIT_NAMES & {comm, exe_name} or (has("/etc/sv") and has("/etc/service")):
        return InitSystem.RUNIT
    if comm == "init" and has("/etc/init.d") and has("/etc/rc.d"):
        return InitSystem.SYSV
    if comm == "openrc" or (has("/etc/init.d") and has("/run/openrc")):
        return InitSystem.OPENRC
    if comm == "s6-svscan" or has("/etc/s6"):
        return InitSystem.S6
    if comm == "dinit" or has("/etc/dinit"):
        return InitSystem.DINIT
    return InitSystem.UNKNOWN