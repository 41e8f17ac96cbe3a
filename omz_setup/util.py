from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence


def expand_path(s: str) -> Path:
    # Expand ~ and $VARS
    return Path(os.path.expandvars(os.path.expanduser(s)))


def sh_join(args: Sequence[str]) -> str:
    return shlex.join(list(args))


class SetupError(RuntimeError):
    """A stage cannot continue; the run stops with a non-zero exit."""


class CommandError(RuntimeError):
    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(args)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {sh_join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.rstrip()}"
        super().__init__(msg)


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    def __init__(self, *, dry_run: bool, logger) -> None:
        self._dry_run = dry_run
        self._logger = logger

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def run(
        self,
        args: Iterable[str],
        *,
        check: bool = False,
        capture: bool = True,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> RunResult:
        argv = list(args)

        # Keep low-level process logs at DEBUG so high-level output can stay
        # "one log line per stage".
        self._logger.debug("RUN %s", sh_join(argv))
        if self._dry_run:
            return RunResult(args=argv, returncode=0, stdout="", stderr="")

        merged_env = None
        if env is not None:
            merged_env = dict(os.environ)
            merged_env.update(dict(env))

        try:
            cp = subprocess.run(
                argv,
                text=True,
                capture_output=capture,
                check=False,  # we handle below to include logs
                cwd=str(cwd) if cwd is not None else None,
                env=merged_env,
            )
        except FileNotFoundError as e:
            # Same status a shell reports for an unknown command.
            if check:
                raise CommandError(argv, 127, str(e)) from e
            return RunResult(args=argv, returncode=127, stdout="", stderr=str(e))

        if check and cp.returncode != 0:
            raise CommandError(argv, cp.returncode, cp.stderr or "")
        return RunResult(
            args=argv,
            returncode=cp.returncode,
            stdout=cp.stdout or "",
            stderr=cp.stderr or "",
        )
