"""Interactive confirmation flow run before installing."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

from . import log
from .config import Config
from .log import MSG_CONFIRM_ACTION, MSG_REMOVE_OLD, MSG_SELECT_CHANNEL, MSG_SELECT_XZ_BACKEND
from .prompts import (
    UI,
    Conditional,
    Step,
    confirm,
    confirm_lazy,
    log_step,
    select_stable_beta,
    select_xz_backend,
)

UPGRADE_QUESTION = "Mullvad VPN %s is already installed. Upgrade instead?"
ABORT_MESSAGE = "Aborted by user"


@dataclass
class UserContext:
    """Answers gathered by the wizard, alongside the run configuration."""

    config: Config
    installed_version: str = ""
    channel: str = ""
    confirmed: bool = False
    do_remove: bool = False
    use_system_xz: bool = False


def detect_installed_version() -> str | None:
    """Return the installed daemon version, or None when it is not installed."""
    try:
        result = subprocess.run(
            ["mullvad-daemon", "--version"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    fields = result.stdout.split()
    if not fields:
        raise ValueError("cannot parse mullvad-daemon version output")
    return fields[-1]


class Wizard:
    """Asks the questions that decide what an installation run does."""

    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg

    def _detect_step(self, ctx: UserContext) -> Step:
        def step(ui: UI) -> None:
            version = detect_installed_version()
            if version is None:
                return
            ctx.installed_version = version
            log.info("Detected installed Mullvad VPN version:", version)

            def on_result(ok: bool) -> None:
                if not ok:
                    log.info(ABORT_MESSAGE)
                    raise SystemExit(0)
                ctx.do_remove = True
                ctx.config.force_all = True

            confirm_lazy(
                UPGRADE_QUESTION,
                ctx.config.assume_yes,
                on_result,
                lambda: version,
            )(ui)

        return step

    def run(self, ui: UI) -> UserContext:
        """Run every question and return the collected answers.

        Declining a question ends the program with status 0.
        """
        cfg = self.cfg
        ctx = UserContext(config=cfg)

        ui.run_all(log_step(log.hi), self._detect_step(ctx))

        def set_channel(channel: str) -> None:
            ctx.channel = channel

        def set_confirmed(ok: bool) -> None:
            ctx.confirmed = ok

        ui.run_all(
            select_stable_beta(MSG_SELECT_CHANNEL, set_channel),
            confirm_lazy(
                MSG_CONFIRM_ACTION,
                cfg.assume_yes,
                set_confirmed,
                lambda: cfg.action,
                lambda: ctx.channel,
            ),
        )
        if not ctx.confirmed:
            log.info(ABORT_MESSAGE)
            raise SystemExit(0)

        def on_remove(ok: bool) -> None:
            if not ok:
                log.info(ABORT_MESSAGE)
                raise SystemExit(0)
            ctx.do_remove = ok
            cfg.force_all = ok

        def set_backend(use_system: bool) -> None:
            ctx.use_system_xz = use_system

        ui.run_all(
            Conditional(
                cond=lambda: not ctx.do_remove,
                step=confirm(MSG_REMOVE_OLD, cfg.force_all, on_remove),
            ).run,
            select_xz_backend(MSG_SELECT_XZ_BACKEND, set_backend),
        )
        return ctx