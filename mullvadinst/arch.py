"""Host CPU architecture detection."""

from __future__ import annotations

import platform
from dataclasses import dataclass

_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


@dataclass(frozen=True)
class OSInfo:
    """Facts about the host needed to pick a package."""

    arch: str


def map_arch(machine: str) -> str:
    """Map a machine name to the architecture name used in package files."""
    key = machine.lower()
    return _ALIASES.get(key, key)


def detect() -> OSInfo:
    """Describe the running host."""
    return OSInfo(arch=map_arch(platform.machine()))