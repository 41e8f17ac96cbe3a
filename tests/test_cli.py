from __future__ import annotations

from omz_setup import cli
from omz_setup.settings import Settings
from omz_setup.util import SetupError


def _settings(home):
    return Settings.for_home(home, env={"SHELL": "/bin/bash"})


def test_dry_run_leaves_home_untouched(home, monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: None)
    # With nothing on PATH the zsh stage is fatal even in dry-run.
    assert cli.main(["--dry-run"], settings=_settings(home)) == 1
    assert list(home.iterdir()) == []


def test_success_exit_code(home, monkeypatch):
    calls = []

    def fake_run_steps(ctx):
        calls.append(ctx)

    monkeypatch.setattr(cli, "run_steps", fake_run_steps)
    assert cli.main([], settings=_settings(home)) == 0
    assert calls[0].options.dry_run is False
    assert calls[0].settings.zshrc == home / ".zshrc"


def test_fatal_error_exit_code(home, monkeypatch):
    def boom(ctx):
        raise SetupError("No supported package manager detected")

    monkeypatch.setattr(cli, "run_steps", boom)
    assert cli.main([], settings=_settings(home)) == 1


def test_config_override_reaches_steps(home, tmp_path, monkeypatch):
    cfg = tmp_path / "omz.json"
    cfg.write_text('{"enable": ["git", "z"], "plugins": []}')
    seen = []
    monkeypatch.setattr(cli, "run_steps", lambda ctx: seen.append(ctx.settings))

    assert cli.main(["--config", str(cfg), "--skip-chsh"], settings=_settings(home)) == 0
    assert seen[0].enable == ("git", "z")
    assert seen[0].plugins == ()


def test_bad_config_exit_code(home, tmp_path):
    cfg = tmp_path / "omz.toml"
    cfg.write_text("enable = [")
    assert cli.main(["--config", str(cfg)], settings=_settings(home)) == 2


def test_latin1_zshrc_does_not_abort_run(home, monkeypatch):
    from omz_setup import steps

    (home / ".zshrc").write_bytes(b"plugins=(git)\nalias caf\xe9='echo'\n")
    monkeypatch.setattr(cli, "run_steps", lambda ctx: steps.run_steps(ctx, [steps.UpdateZshrcStep()]))
    assert cli.main([], settings=_settings(home)) == 0
    assert b"alias caf\xe9='echo'" in (home / ".zshrc").read_bytes()
