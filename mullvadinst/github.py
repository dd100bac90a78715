"""Lookup of the latest published release for a channel."""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

API_URL = "https://api.github.com/repos/mullvad/mullvadvpn-app/releases?per_page=50"
REQUEST_TIMEOUT = 15.0

_ANDROID_TAG = re.compile(r"^android/", re.IGNORECASE)
_BETA_TAG = re.compile(r"-beta\d*$")
_ANY_BETA = re.compile(r"-beta")


class ReleaseError(Exception):
    """A release could not be fetched or none matched."""


@dataclass(frozen=True)
class Asset:
    name: str
    url: str


@dataclass(frozen=True)
class Release:
    tag: str
    assets: list[Asset] = field(default_factory=list)


def filter_channel(tag: str, channel: str) -> bool:
    """Return True when ``tag`` belongs to the desktop ``channel``."""
    if _ANDROID_TAG.search(tag):
        return False
    if channel == "stable":
        return not _ANY_BETA.search(tag)
    if channel == "beta":
        return bool(_BETA_TAG.search(tag))
    return False


def select_release(raw_releases: Iterable[Mapping], channel: str) -> Release:
    """Pick the first release of ``channel`` from decoded API records."""
    for raw in raw_releases:
        tag = raw.get("tag_name") or ""
        if filter_channel(tag, channel):
            assets = [
                Asset(name=a.get("name") or "", url=a.get("browser_download_url") or "")
                for a in raw.get("assets") or []
            ]
            return Release(tag=tag, assets=assets)
    raise ReleaseError(f'no "{channel}" release found')


def get_latest_release(channel: str) -> Release:
    """Query the release API and return the newest release of ``channel``."""
    try:
        with urllib.request.urlopen(API_URL, timeout=REQUEST_TIMEOUT) as resp:
            status = getattr(resp, "status", 200)
            if status != 200:
                raise ReleaseError(f"status {status} from GitHub API")
            data = resp.read()
    except urllib.error.HTTPError as exc:
        raise ReleaseError(f"status {exc.code} from GitHub API") from exc
    except OSError as exc:
        raise ReleaseError(f"fetch releases: {exc}") from exc
    try:
        raws = json.loads(data)
    except ValueError as exc:
        raise ReleaseError(f"unmarshal JSON: {exc}") from exc
    if not isinstance(raws, list):
        raise ReleaseError("unmarshal JSON: expected a list")
    return select_release(raws, channel)