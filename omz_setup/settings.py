from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Sequence

from omz_setup.util import expand_path


@dataclass(frozen=True)
class PluginSource:
    name: str
    url: str


DEFAULT_PLUGINS: tuple[PluginSource, ...] = (
    PluginSource("zsh-autosuggestions", "https://github.com/zsh-users/zsh-autosuggestions.git"),
    PluginSource("zsh-syntax-highlighting", "https://github.com/zsh-users/zsh-syntax-highlighting.git"),
    PluginSource("you-should-use", "https://github.com/MichaelAquilina/zsh-you-should-use.git"),
    PluginSource("zsh-bat", "https://github.com/fdellwing/zsh-bat.git"),
    PluginSource("z", "https://github.com/rupa/z.git"),
)

DEFAULT_ENABLE: tuple[str, ...] = (
    "git",
    "z",
    "zsh-autosuggestions",
    "zsh-syntax-highlighting",
    "you-should-use",
    "zsh-bat",
)
# Source order matters: zsh-syntax-highlighting must come last.
DEFAULT_SOURCED: tuple[str, ...] = ("zsh-autosuggestions", "zsh-syntax-highlighting")

OMZ_INSTALLER_URL = "https://raw.github.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
BACKUP_PREFIX = ".zshrc.pre-omz-"


def _check_unique(plugins: Sequence[PluginSource]) -> None:
    seen: set[str] = set()
    for p in plugins:
        if p.name in seen:
            raise ValueError(f"Duplicate plugin name in registry: {p.name}")
        seen.add(p.name)


@dataclass(frozen=True)
class Settings:
    """
    Everything the stages read. Built once by the CLI and passed down, so tests
    can point it at a temporary home directory.
    """

    home: Path
    zsh_custom: Path
    omz_home: Path
    zshrc: Path
    current_shell: str | None = None
    backup_prefix: str = BACKUP_PREFIX
    installer_url: str = OMZ_INSTALLER_URL
    package: str = "zsh"
    plugins: tuple[PluginSource, ...] = field(default=DEFAULT_PLUGINS)
    enable: tuple[str, ...] = field(default=DEFAULT_ENABLE)
    sourced: tuple[str, ...] = field(default=DEFAULT_SOURCED)

    def __post_init__(self) -> None:
        _check_unique(self.plugins)

    @property
    def plugins_root(self) -> Path:
        return self.zsh_custom / "plugins"

    def plugin_dir(self, name: str) -> Path:
        return self.plugins_root / name

    @classmethod
    def for_home(cls, home: Path, *, env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env
        omz_home = home / ".oh-my-zsh"
        custom = env.get("ZSH_CUSTOM")
        zsh_custom = expand_path(custom) if custom else omz_home / "custom"
        return cls(
            home=home,
            zsh_custom=zsh_custom,
            omz_home=omz_home,
            zshrc=home / ".zshrc",
            current_shell=env.get("SHELL") or None,
        )

    @classmethod
    def from_env(cls) -> "Settings":
        return cls.for_home(Path.home())

    def with_overrides(
        self,
        *,
        plugins: Sequence[PluginSource] | None = None,
        enable: Sequence[str] | None = None,
        zsh_custom: Path | None = None,
    ) -> "Settings":
        changes: dict = {}
        if plugins is not None:
            changes["plugins"] = tuple(plugins)
        if enable is not None:
            changes["enable"] = tuple(enable)
        if zsh_custom is not None:
            changes["zsh_custom"] = zsh_custom
        return replace(self, **changes)
