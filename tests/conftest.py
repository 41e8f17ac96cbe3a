from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest

from omz_setup.core import Context, Options
from omz_setup.settings import Settings
from omz_setup.util import CommandError, RunResult


class FakeRunner:
    """Records argv lists instead of running them."""

    def __init__(self, *, which: dict[str, str] | None = None, dry_run: bool = False) -> None:
        self.paths: dict[str, str] = dict(which or {})
        self.calls: list[list[str]] = []
        self.envs: list[dict | None] = []
        self.returncodes: dict[str, int] = {}
        self.stdout: dict[str, str] = {}
        self.on_run = None
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def which(self, name: str) -> str | None:
        return self.paths.get(name)

    def fail(self, prefix: str, code: int = 1) -> None:
        self.returncodes[prefix] = code

    def _lookup(self, table: dict, argv: list[str], default):
        joined = " ".join(argv)
        for prefix, value in table.items():
            if joined.startswith(prefix):
                return value
        return default

    def run(self, args, *, check=False, capture=True, cwd=None, env=None) -> RunResult:
        argv = list(args)
        self.calls.append(argv)
        self.envs.append(dict(env) if env is not None else None)
        if self.on_run is not None:
            self.on_run(argv)
        code = self._lookup(self.returncodes, argv, 0)
        out = self._lookup(self.stdout, argv, "")
        if check and code != 0:
            raise CommandError(argv, code, "boom")
        return RunResult(args=argv, returncode=code, stdout=out, stderr="boom" if code else "")

    def commands(self, tool: str) -> list[list[str]]:
        return [c for c in self.calls if c and c[0] == tool]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def settings(home: Path) -> Settings:
    return Settings.for_home(home, env={"SHELL": "/bin/bash"})


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("omz_setup_tests")


@pytest.fixture
def make_ctx(settings, runner, logger):
    def _make(*, settings_=None, runner_=None, **opts) -> Context:
        return Context(
            settings=settings_ or settings,
            logger=logger,
            runner=runner_ or runner,
            options=Options(**opts),
            clock=lambda: datetime(2024, 5, 1, 12, 30, 0),
        )

    return _make
