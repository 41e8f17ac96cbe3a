from __future__ import annotations

from omz_setup import zshrc
from omz_setup.backends.download import DownloadBackend
from omz_setup.backends.git import GitBackend
from omz_setup.backends.login_shell import ChshBackend, same_shell
from omz_setup.backends.packages import SystemPackageBackend
from omz_setup.core import Command, Context
from omz_setup.util import SetupError


class InstallZshStep:
    def apply(self, ctx: Context) -> str:
        package = ctx.settings.package
        found = ctx.runner.which(package)
        if found is not None:
            return f"{package} detected: {found}"

        ctx.logger.info("%s not found, attempting installation via system package manager...", package)
        backend = SystemPackageBackend(runner=ctx.runner, logger=ctx.logger)
        pm = backend.detect()
        if pm is None:
            names = " / ".join(m.name for m in backend.managers)
            raise SetupError(
                f"No supported package manager detected ({names}). Cannot install {package} automatically."
            )

        if ctx.options.dry_run:
            return f"Would install {package} with {pm.name}."

        # One attempt with the first manager found; no fallback to the next one.
        backend.install(pm, package)

        found = ctx.runner.which(package)
        if found is None:
            raise SetupError(f"{package} installation failed.")
        return f"{package} installation completed: {found}"


class InstallOhMyZshStep:
    def apply(self, ctx: Context) -> str:
        s = ctx.settings
        if s.omz_home.is_dir():
            return f"Existing {s.omz_home} detected, skipping Oh My Zsh installation."

        backend = DownloadBackend(runner=ctx.runner, logger=ctx.logger)
        fetcher = backend.detect()
        if fetcher is None:
            raise SetupError("Neither curl nor wget is available. Cannot download Oh My Zsh installer.")

        if ctx.options.dry_run:
            return f"Would install Oh My Zsh from {s.installer_url} (via {fetcher[0]})."

        ctx.logger.info("Installing Oh My Zsh (non-interactive mode)...")
        script = backend.fetch_text(fetcher, s.installer_url)
        # The login shell is changed by DefaultShellStep only.
        ctx.runner.run(
            ["sh", "-c", script, "sh", "--unattended"],
            check=True,
            capture=False,
            env={"RUNZSH": "no", "CHSH": "no", "ZSH": str(s.omz_home)},
        )
        return "Oh My Zsh installation completed."


class InstallPluginsStep:
    def apply(self, ctx: Context) -> str:
        s = ctx.settings
        if not s.plugins:
            return "No plugins to install."

        if ctx.options.dry_run:
            names = ", ".join(p.name for p in s.plugins)
            return f"Would install/update plugins under {s.plugins_root}: {names}."

        s.plugins_root.mkdir(parents=True, exist_ok=True)
        git = GitBackend(runner=ctx.runner, logger=ctx.logger)

        cloned = updated = failed = 0
        for plugin in s.plugins:
            target = s.plugin_dir(plugin.name)
            if git.is_checkout(target):
                ctx.logger.info("Plugin %s already exists, updating...", plugin.name)
                res = git.pull_ff_only(target)
                if res.ok:
                    updated += 1
                else:
                    failed += 1
                    ctx.logger.warning(
                        "Failed to update plugin %s (fast-forward only): %s",
                        plugin.name,
                        res.stderr.strip() or f"exit {res.returncode}",
                    )
                continue

            ctx.logger.info("Cloning plugin %s...", plugin.name)
            res = git.clone(plugin.url, target)
            if res.ok:
                cloned += 1
            else:
                failed += 1
                ctx.logger.warning(
                    "Failed to clone plugin %s. You may install it manually later. %s",
                    plugin.name,
                    res.stderr.strip(),
                )

        return f"Plugins: {cloned} cloned, {updated} updated, {failed} failed."


class UpdateZshrcStep:
    def apply(self, ctx: Context) -> str:
        s = ctx.settings
        path = s.zshrc
        lines = zshrc.read_lines(path)
        new_lines = zshrc.rewrite(lines, enable=s.enable, sourced=s.sourced)

        if ctx.options.dry_run:
            verb = "update" if path.exists() else "create"
            return f"Would {verb} {path} ({len(lines)} -> {len(new_lines)} lines)."

        saved = zshrc.backup(path, prefix=s.backup_prefix, now=ctx.clock())
        if saved is not None:
            ctx.logger.info("Backed up existing %s to %s", path, saved)
        else:
            ctx.logger.info("%s not found, creating a new one.", path)

        zshrc.write_atomic(path, zshrc.render(new_lines))
        return f"{path} configuration completed."


class DefaultShellStep:
    def apply(self, ctx: Context) -> str:
        s = ctx.settings
        if ctx.options.skip_chsh:
            return "Skipped changing the default shell."

        zsh_path = ctx.runner.which(s.package)
        if zsh_path is None:
            if ctx.options.dry_run:
                return f"Would change default shell to {s.package}."
            raise SetupError(f"{s.package} not found, cannot set default shell.")

        if same_shell(s.current_shell, zsh_path):
            return f"Default shell is already {s.package} ({zsh_path})."

        if ctx.options.dry_run:
            return f"Would change default shell to {zsh_path}."

        ctx.logger.info("Changing default shell to %s (%s)...", s.package, zsh_path)
        ChshBackend(runner=ctx.runner, logger=ctx.logger).change(zsh_path)
        return f"Default shell changed to {s.package}. Log out and back in for it to take effect."


def default_steps() -> list[Command]:
    # Order matters: later stages assume the earlier ones succeeded.
    return [
        InstallZshStep(),
        InstallOhMyZshStep(),
        InstallPluginsStep(),
        UpdateZshrcStep(),
        DefaultShellStep(),
    ]


def run_steps(ctx: Context, steps: list[Command] | None = None) -> None:
    steps = default_steps() if steps is None else steps
    for i, step in enumerate(steps, start=1):
        msg = step.apply(ctx)
        if i == len(steps):
            ctx.logger.info("└─ %s", msg)
        else:
            ctx.logger.info("├─ %s", msg)
