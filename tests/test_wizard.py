import io
import subprocess
from unittest import mock

import pytest

from mullvadinst import log
from mullvadinst.config import ActionType, Config
from mullvadinst.prompts import UI
from mullvadinst.wizard import UserContext, Wizard, detect_installed_version


@pytest.fixture(autouse=True)
def plain_logging():
    log.init_logger(True)
    yield
    log.init_logger(False)


def make_ui(answers: str, assume_yes: bool = False) -> UI:
    return UI(
        in_stream=io.StringIO(answers),
        out=io.StringIO(),
        err=io.StringIO(),
        assume_yes=assume_yes,
        dry_run=False,
        no_color=True,
    )


def not_installed():
    return mock.patch("subprocess.run", side_effect=FileNotFoundError("mullvad-daemon"))


def installed(output: str):
    return mock.patch(
        "subprocess.run",
        return_value=subprocess.CompletedProcess(
            ["mullvad-daemon", "--version"], 0, stdout=output, stderr=""
        ),
    )


def test_detect_installed_version_missing_binary():
    with not_installed():
        assert detect_installed_version() is None


def test_detect_installed_version_failed_command():
    error = subprocess.CalledProcessError(1, ["mullvad-daemon", "--version"])
    with mock.patch("subprocess.run", side_effect=error):
        assert detect_installed_version() is None


def test_detect_installed_version_takes_last_field():
    with installed("mullvad-daemon 2025.3\n"):
        assert detect_installed_version() == "2025.3"


def test_detect_installed_version_empty_output():
    with installed("   \n"):
        with pytest.raises(ValueError, match="cannot parse"):
            detect_installed_version()


def test_non_interactive_defaults():
    cfg = Config(assume_yes=True)
    ui = make_ui("", assume_yes=True)
    with not_installed():
        ctx = Wizard(cfg).run(ui)
    assert isinstance(ctx, UserContext)
    assert ctx.channel == "stable"
    assert ctx.confirmed is True
    assert ctx.do_remove is True
    assert ctx.use_system_xz is False
    assert cfg.force_all is True
    assert ctx.installed_version == ""


def test_interactive_beta_and_system_backend():
    cfg = Config()
    ui = make_ui("2\ny\ny\n2\n")
    with not_installed():
        ctx = Wizard(cfg).run(ui)
    assert ctx.channel == "beta"
    assert ctx.confirmed is True
    assert ctx.do_remove is True
    assert ctx.use_system_xz is True
    assert 'Proceed to install with channel "beta"?' in ui.out.getvalue()


def test_confirm_question_uses_action():
    cfg = Config(action=ActionType.UPGRADE)
    ui = make_ui("1\ny\ny\n1\n")
    with not_installed():
        ctx = Wizard(cfg).run(ui)
    assert ctx.channel == "stable"
    assert 'Proceed to upgrade with channel "stable"?' in ui.out.getvalue()


def test_declining_action_exits_zero(capsys):
    ui = make_ui("1\nn\n")
    with not_installed():
        with pytest.raises(SystemExit) as info:
            Wizard(Config()).run(ui)
    assert info.value.code == 0
    assert "Aborted by user" in capsys.readouterr().out


def test_default_answer_declines_when_not_assumed():
    ui = make_ui("1\n\n")
    with not_installed():
        with pytest.raises(SystemExit) as info:
            Wizard(Config()).run(ui)
    assert info.value.code == 0


def test_declining_removal_exits_zero():
    ui = make_ui("1\ny\nn\n")
    with not_installed():
        with pytest.raises(SystemExit) as info:
            Wizard(Config()).run(ui)
    assert info.value.code == 0


def test_installed_version_skips_removal_question(capsys):
    cfg = Config()
    ui = make_ui("y\n1\ny\n1\n")
    with installed("mullvad-daemon 2025.3\n"):
        ctx = Wizard(cfg).run(ui)
    assert ctx.installed_version == "2025.3"
    assert ctx.do_remove is True
    assert cfg.force_all is True
    assert ctx.use_system_xz is False
    out = ui.out.getvalue()
    assert "Mullvad VPN 2025.3 is already installed. Upgrade instead?" in out
    assert "Remove old installation first?" not in out
    assert "Detected installed Mullvad VPN version:2025.3" in capsys.readouterr().out


def test_declining_upgrade_exits_zero():
    ui = make_ui("n\n")
    with installed("mullvad-daemon 2025.3\n"):
        with pytest.raises(SystemExit) as info:
            Wizard(Config()).run(ui)
    assert info.value.code == 0


def test_end_of_input_raises():
    ui = make_ui("")
    with not_installed():
        with pytest.raises(EOFError):
            Wizard(Config()).run(ui)


def test_banner_is_printed(capsys):
    ui = make_ui("", assume_yes=True)
    with not_installed():
        Wizard(Config(assume_yes=True)).run(ui)
    assert log.MSG_WELCOME in capsys.readouterr().out