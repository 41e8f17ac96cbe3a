from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from omz_setup.util import CommandRunner, RunResult


@dataclass(frozen=True)
class GitBackend:
    runner: CommandRunner
    logger: logging.Logger

    @staticmethod
    def is_checkout(path: Path) -> bool:
        return (path / ".git").exists()

    def _run(self, argv: list[str]) -> RunResult:
        res = self.runner.run(argv, check=False, capture=True)
        if res.stdout.strip():
            self.logger.debug("git stdout:\n%s", res.stdout.rstrip())
        if res.returncode != 0 and res.stderr.strip():
            self.logger.debug("git stderr:\n%s", res.stderr.rstrip())
        return res

    def clone(self, url: str, target: Path) -> RunResult:
        return self._run(["git", "clone", url, str(target)])

    def pull_ff_only(self, target: Path) -> RunResult:
        return self._run(["git", "-C", str(target), "pull", "--ff-only"])
