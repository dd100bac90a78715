import json
from unittest import mock

import pytest

from mullvadinst.github import (
    Asset,
    ReleaseError,
    filter_channel,
    get_latest_release,
    select_release,
)

RAWS = [
    {"tag_name": "android/2024.1", "assets": []},
    {"tag_name": "2025.3-beta1", "assets": [{"name": "b.deb", "browser_download_url": "u1"}]},
    {"tag_name": "2025.2", "assets": [{"name": "s.deb", "browser_download_url": "u2"}]},
]


@pytest.mark.parametrize(
    "tag,channel,expected",
    [
        ("2025.2", "stable", True),
        ("2025.3-beta1", "stable", False),
        ("2025.3-beta1", "beta", True),
        ("2025.3-beta", "beta", True),
        ("2025.2", "beta", False),
        ("Android/2025.2", "stable", False),
        ("2025.2", "nightly", False),
    ],
)
def test_filter_channel(tag, channel, expected):
    assert filter_channel(tag, channel) is expected


def test_select_release_picks_first_match():
    rel = select_release(RAWS, "stable")
    assert rel.tag == "2025.2"
    assert rel.assets == [Asset("s.deb", "u2")]
    assert select_release(RAWS, "beta").tag == "2025.3-beta1"


def test_select_release_none():
    with pytest.raises(ReleaseError):
        select_release(RAWS[:1], "stable")


class _Resp:
    def __init__(self, body, status=200):
        self.body, self.status = body, status

    def read(self):
        return self.body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_get_latest_release_over_http():
    with mock.patch("urllib.request.urlopen", return_value=_Resp(json.dumps(RAWS).encode())):
        assert get_latest_release("beta").tag == "2025.3-beta1"


def test_get_latest_release_bad_status():
    with mock.patch("urllib.request.urlopen", return_value=_Resp(b"[]", status=500)):
        with pytest.raises(ReleaseError, match="500"):
            get_latest_release("stable")


def test_get_latest_release_bad_json():
    with mock.patch("urllib.request.urlopen", return_value=_Resp(b"{nope")):
        with pytest.raises(ReleaseError):
            get_latest_release("stable")