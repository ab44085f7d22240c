# deck_estimator/logger.py
# Diagnostics for the estimator:
# - info lines (cut plan summaries) on stdout
# - validation issues (degraded geometry, product mismatches) on stderr
# - mute everything except hard errors, e.g. for --quiet or inside tests

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator

from .types import ValidationIssue


@dataclass
class Logger:
    enabled: bool = True
    prefix: str = "[DECK]"

    def info(self, msg: str) -> None:
        if self.enabled:
            print(f"{self.prefix} {msg}", file=sys.stdout)

    def warn(self, msg: str) -> None:
        if self.enabled:
            print(f"{self.prefix} WARNING: {msg}", file=sys.stderr)

    def error(self, msg: str) -> None:
        print(f"{self.prefix} ERROR: {msg}", file=sys.stderr)

    def issues(self, issues: Iterable[ValidationIssue]) -> None:
        """One line per issue; ERROR-level geometry issues still respect `enabled`."""
        for i in issues:
            self.warn(f"{i.level} {i.code}: {i.message}")


LOGGER = Logger(enabled=True)


def set_enabled(flag: bool) -> bool:
    """Switch diagnostics on/off; returns the previous setting."""
    prev = LOGGER.enabled
    LOGGER.enabled = bool(flag)
    return prev


@contextmanager
def muted() -> Iterator[Logger]:
    prev = set_enabled(False)
    try:
        yield LOGGER
    finally:
        set_enabled(prev)


def get_logger() -> Logger:
    return LOGGER
