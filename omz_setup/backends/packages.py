from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from omz_setup.util import CommandRunner, sh_join


@dataclass(frozen=True)
class PackageManager:
    name: str
    # Each entry is an argv template; "{package}" is substituted.
    steps: tuple[tuple[str, ...], ...]

    def commands(self, package: str) -> list[list[str]]:
        return [[arg.replace("{package}", package) for arg in step] for step in self.steps]


# Probe order is the priority order; the first manager found wins.
PACKAGE_MANAGERS: tuple[PackageManager, ...] = (
    PackageManager("apt", (("apt", "update"), ("apt", "install", "-y", "{package}"))),
    PackageManager("dnf", (("dnf", "install", "-y", "{package}"),)),
    PackageManager("pacman", (("pacman", "-Sy", "--noconfirm", "{package}"),)),
    PackageManager("brew", (("brew", "install", "{package}"),)),
)


@dataclass(frozen=True)
class SystemPackageBackend:
    runner: CommandRunner
    logger: logging.Logger
    managers: Sequence[PackageManager] = PACKAGE_MANAGERS

    def detect(self) -> PackageManager | None:
        for pm in self.managers:
            if self.runner.which(pm.name) is not None:
                return pm
        return None

    def install(self, pm: PackageManager, package: str) -> bool:
        """Run the manager's install sequence; stop at the first failing step."""
        for argv in pm.commands(package):
            res = self.runner.run(argv, check=False, capture=False)
            if res.returncode != 0:
                self.logger.error("`%s` exited with %d", sh_join(argv), res.returncode)
                return False
        return True
