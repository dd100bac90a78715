"""Fetch, verify, unpack and install the Mullvad VPN desktop app on Linux."""

__version__ = "0.1.0"