from __future__ import annotations

import logging
import sys

import pytest

from omz_setup.util import CommandError, CommandRunner, sh_join

logger = logging.getLogger("omz_setup_tests")


def test_dry_run_does_not_execute(tmp_path):
    marker = tmp_path / "marker"
    runner = CommandRunner(dry_run=True, logger=logger)
    res = runner.run(["touch", str(marker)], check=True)
    assert res.returncode == 0
    assert not marker.exists()


def test_run_captures_output():
    runner = CommandRunner(dry_run=False, logger=logger)
    res = runner.run([sys.executable, "-c", "print('hi')"])
    assert res.ok
    assert res.stdout.strip() == "hi"


def test_run_check_raises_with_status():
    runner = CommandRunner(dry_run=False, logger=logger)
    with pytest.raises(CommandError) as exc:
        runner.run([sys.executable, "-c", "import sys; sys.exit(3)"], check=True)
    assert exc.value.returncode == 3


def test_missing_executable_is_127():
    runner = CommandRunner(dry_run=False, logger=logger)
    res = runner.run(["omz-setup-no-such-binary"])
    assert res.returncode == 127
    with pytest.raises(CommandError):
        runner.run(["omz-setup-no-such-binary"], check=True)


def test_env_is_merged():
    runner = CommandRunner(dry_run=False, logger=logger)
    res = runner.run(
        [sys.executable, "-c", "import os; print(os.environ['RUNZSH'], 'PATH' in os.environ)"],
        env={"RUNZSH": "no"},
    )
    assert res.stdout.split() == ["no", "True"]


def test_sh_join_quotes():
    assert sh_join(["sh", "-c", "echo hi"]) == "sh -c 'echo hi'"
