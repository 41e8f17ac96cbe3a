from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from omz_setup.util import CommandRunner


def same_shell(current: str | None, wanted: str) -> bool:
    """Compare the raw paths first, then what they resolve to (e.g. /bin -> /usr/bin)."""
    if not current:
        return False
    if current == wanted:
        return True
    try:
        return Path(current).resolve() == Path(wanted).resolve()
    except OSError:
        return False


@dataclass(frozen=True)
class ChshBackend:
    runner: CommandRunner
    logger: logging.Logger

    def change(self, shell_path: str) -> None:
        # chsh may prompt for a password; let it talk to the terminal.
        self.logger.debug("Setting login shell to %s", shell_path)
        self.runner.run(["chsh", "-s", shell_path], check=True, capture=False)
