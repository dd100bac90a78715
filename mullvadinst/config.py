"""Command-line configuration."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .log import MSG_SELECT_CHANNEL


class ActionType(str, Enum):
    INSTALL = "install"
    REMOVE = "remove"
    UPGRADE = "upgrade"

    def __str__(self) -> str:
        return self.value


@dataclass
class Config:
    """Options that control a run."""

    assume_yes: bool = False
    dry_run: bool = False
    no_color: bool = False
    force_all: bool = False
    action: ActionType = ActionType.INSTALL
    channel: str = ""


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(allow_abbrev=False)
    parser.add_argument("--yes", action="store_true", help="assume yes to all prompts")
    parser.add_argument(
        "--dry-run", action="store_true", help="show actions but do not execute"
    )
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    parser.add_argument(
        "--force-remove-all",
        action="store_true",
        help="skip all remove prompts (implies --yes)",
    )
    parser.add_argument(
        "--channel",
        default="",
        help="release channel: stable|beta (if omitted, will prompt)",
    )
    parser.add_argument("--remove", action="store_true", help="remove the installation")
    parser.add_argument("--upgrade", action="store_true", help="upgrade the installation")
    return parser


def parse_flags(argv: Sequence[str] | None = None) -> Config:
    """Parse command-line arguments into a Config."""
    args_list = list(sys.argv[1:] if argv is None else argv)
    args = _build_parser().parse_args(args_list)

    action = ActionType.INSTALL
    for arg in args_list:
        if arg == "--remove":
            action = ActionType.REMOVE
        elif arg == "--upgrade":
            action = ActionType.UPGRADE

    cfg = Config(
        assume_yes=args.yes or args.force_remove_all,
        dry_run=args.dry_run,
        no_color=args.no_color,
        force_all=args.force_remove_all,
        action=action,
        channel=args.channel,
    )
    if cfg.action is not ActionType.REMOVE and cfg.channel == "":
        cfg.channel = MSG_SELECT_CHANNEL
    if cfg.channel == "":
        cfg.channel = "stable"
    return cfg