from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from omz_setup.settings import Settings
from omz_setup.util import CommandRunner


class Command(Protocol):
    def apply(self, ctx: "Context") -> str: ...


@dataclass(frozen=True)
class Options:
    dry_run: bool = False
    skip_chsh: bool = False


@dataclass(frozen=True)
class Context:
    settings: Settings
    logger: logging.Logger
    runner: CommandRunner
    options: Options
    clock: Callable[[], datetime] = datetime.now


def build_context(
    *,
    settings: Settings,
    options: Options,
    logger: logging.Logger,
) -> Context:
    runner = CommandRunner(dry_run=options.dry_run, logger=logger)
    return Context(
        settings=settings,
        logger=logger,
        runner=runner,
        options=options,
    )
