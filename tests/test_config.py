import pytest

from mullvadinst import log
from mullvadinst.config import ActionType, Config, parse_flags


def test_defaults():
    cfg = parse_flags([])
    assert cfg.action is ActionType.INSTALL
    assert cfg.assume_yes is False
    assert cfg.dry_run is False
    assert cfg.no_color is False
    assert cfg.force_all is False
    assert cfg.channel == log.MSG_SELECT_CHANNEL


def test_yes_flag():
    cfg = parse_flags(["--yes"])
    assert cfg.assume_yes is True
    assert cfg.force_all is False


def test_force_remove_all_implies_yes():
    cfg = parse_flags(["--force-remove-all"])
    assert cfg.assume_yes is True
    assert cfg.force_all is True


def test_dry_run_and_no_color():
    cfg = parse_flags(["--dry-run", "--no-color"])
    assert cfg.dry_run is True
    assert cfg.no_color is True


def test_remove_defaults_to_stable():
    cfg = parse_flags(["--remove"])
    assert cfg.action is ActionType.REMOVE
    assert cfg.channel == "stable"


def test_upgrade_with_channel():
    cfg = parse_flags(["--upgrade", "--channel", "beta"])
    assert cfg.action is ActionType.UPGRADE
    assert cfg.channel == "beta"


def test_last_action_wins():
    assert parse_flags(["--remove", "--upgrade"]).action is ActionType.UPGRADE
    assert parse_flags(["--upgrade", "--remove"]).action is ActionType.REMOVE


def test_explicit_channel_kept_for_install():
    assert parse_flags(["--channel=stable"]).channel == "stable"


def test_unknown_flag_exits():
    with pytest.raises(SystemExit):
        parse_flags(["--bogus"])


def test_parsed_action_str():
    assert str(parse_flags([]).action) == "install"
    assert "%s" % parse_flags(["--remove"]).action == "remove"


def test_config_is_mutable():
    cfg = Config()
    cfg.force_all = True
    assert cfg.force_all is True
    assert cfg.action is ActionType.INSTALL