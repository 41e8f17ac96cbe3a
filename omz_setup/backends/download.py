from __future__ import annotations

import logging
from dataclasses import dataclass

from omz_setup.util import CommandRunner

# First tool found on PATH wins.
FETCHERS: tuple[tuple[str, ...], ...] = (
    ("curl", "-fsSL"),
    ("wget", "-qO-"),
)


@dataclass(frozen=True)
class DownloadBackend:
    runner: CommandRunner
    logger: logging.Logger

    def detect(self) -> tuple[str, ...] | None:
        for fetcher in FETCHERS:
            path = self.runner.which(fetcher[0])
            if path is not None:
                self.logger.debug("Using %s for downloads", path)
                return fetcher
        return None

    def fetch_text(self, fetcher: tuple[str, ...], url: str) -> str:
        res = self.runner.run([*fetcher, url], check=True, capture=True)
        self.logger.debug("Fetched %d bytes from %s", len(res.stdout), url)
        return res.stdout
