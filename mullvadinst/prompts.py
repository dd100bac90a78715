"""Interactive prompt steps run against a terminal-like UI."""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO

from .log import (
    BLUE,
    MSG_INVALID_CHOICE,
    MSG_INVALID_YES_NO,
    OPT_BETA,
    OPT_STABLE,
    PINK,
    RED,
    RESET,
)

OPT_BUILTIN_XZ = "Built-in parsers (pure-Python ar + lzma decompressor; portable, slower)"
OPT_SYSTEM_XZ = (
    "System utilities (ar+xz; high-performance, requires binutils and xz installed)"
)


@dataclass
class UI:
    """Input and output streams plus the flags that shape prompting."""

    in_stream: TextIO = field(default_factory=lambda: sys.stdin)
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)
    assume_yes: bool = False
    dry_run: bool = False
    no_color: bool = False

    def run_all(self, *steps: Step) -> None:
        """Run steps in order; the first exception stops the rest."""
        for step in steps:
            step(self)

    @property
    def non_interactive(self) -> bool:
        return self.assume_yes or self.dry_run

    def paint(self, color: str, text: str) -> str:
        return text if self.no_color else f"{color}{text}{RESET}"

    def write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def write_line(self, text: str = "") -> None:
        self.write(text + "\n")

    def prompt(self, label: str, default: str = "") -> str:
        """Show a label and read one lower-cased answer line."""
        self.write(label)
        line = self.in_stream.readline()
        if not line.endswith("\n"):
            raise EOFError("unexpected end of input")
        answer = line.strip().lower()
        return answer or default


Step = Callable[[UI], None]


@dataclass
class Conditional:
    """A step that runs only when its condition holds."""

    cond: Callable[[], bool]
    step: Step

    def run(self, ui: UI) -> None:
        if self.cond():
            self.step(ui)


def log_step(func: Callable[[], object]) -> Step:
    """Wrap a no-argument logging call as a step."""

    def step(_ui: UI) -> None:
        func()

    return step


def confirm(msg: str, default: bool, on_result: Callable[[bool], object]) -> Step:
    """Ask a yes/no question; assume yes when not interactive."""

    def step(ui: UI) -> None:
        if ui.non_interactive:
            on_result(True)
            return
        opts = "[Y/n]" if default else "[y/N]"
        label = ui.paint(PINK, f"{msg} {opts} ")
        while True:
            answer = ui.prompt(label)
            if answer in ("y", "yes"):
                on_result(True)
                return
            if answer in ("n", "no"):
                on_result(False)
                return
            if answer == "":
                on_result(default)
                return
            ui.write_line(ui.paint(RED, MSG_INVALID_YES_NO))

    return step


def confirm_lazy(
    fmt: str,
    default: bool,
    on_result: Callable[[bool], object],
    *arg_fns: Callable[[], object],
) -> Step:
    """Like confirm, but the message arguments are computed when the step runs."""

    def step(ui: UI) -> None:
        msg = fmt % tuple(fn() for fn in arg_fns) if arg_fns else fmt
        confirm(msg, default, on_result)(ui)

    return step


def spinner(msg: str, count: int, delay: float) -> Step:
    """Print a message followed by ``count`` dots, ``delay`` seconds apart."""

    def step(ui: UI) -> None:
        ui.write(ui.paint(BLUE, msg))
        for _ in range(count):
            ui.write(ui.paint(BLUE, "."))
            time.sleep(delay)
        ui.write_line()

    return step


def select_two(
    msg: str,
    opt1: str,
    opt2: str,
    def_first: bool,
    on_result: Callable[[bool], object],
) -> Step:
    """Offer two numbered options; option 1 maps to ``def_first``."""

    def step(ui: UI) -> None:
        if ui.non_interactive:
            on_result(def_first)
            return
        ui.write_line(ui.paint(PINK, msg))
        ui.write_line("  1) " + opt1)
        ui.write_line("  2) " + opt2)
        label = ui.paint(PINK, "Choice [1]: ")
        while True:
            answer = ui.prompt(label).strip()
            if answer in ("", "1"):
                on_result(def_first)
                return
            if answer == "2":
                on_result(not def_first)
                return
            ui.write_line(ui.paint(RED, MSG_INVALID_CHOICE))

    return step


def select_stable_beta(msg: str, on_result: Callable[[str], object]) -> Step:
    """Choose between the stable and beta release channels."""
    return select_two(
        msg,
        OPT_STABLE,
        OPT_BETA,
        True,
        lambda first: on_result(OPT_STABLE if first else OPT_BETA),
    )


def select_xz_backend(msg: str, on_result: Callable[[bool], object]) -> Step:
    """Choose the extraction backend; reports True for system utilities."""
    return select_two(
        msg,
        OPT_BUILTIN_XZ,
        OPT_SYSTEM_XZ,
        True,
        lambda first: on_result(not first),
    )