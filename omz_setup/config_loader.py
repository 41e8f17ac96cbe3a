from __future__ import annotations

import json
from dataclasses import dataclass
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from omz_setup.settings import PluginSource, Settings
from omz_setup.util import expand_path


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class LoadedConfig:
    path: Path
    plugins: list[PluginSource] | None
    enable: list[str] | None
    zsh_custom: Path | None

    def apply(self, settings: Settings) -> Settings:
        return settings.with_overrides(
            plugins=self.plugins,
            enable=self.enable,
            zsh_custom=self.zsh_custom,
        )


def _require_str(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{what}' must be a non-empty string")
    return value


def _parse_plugins(value: Any) -> list[PluginSource]:
    # Either an array of {name, url} tables or a {name: url} table.
    if isinstance(value, dict):
        items = [{"name": k, "url": v} for k, v in value.items()]
    elif isinstance(value, list) and all(isinstance(x, dict) for x in value):
        items = value
    else:
        raise ConfigError("'plugins' must be an array of {name, url} tables or a name -> url table")

    out: list[PluginSource] = []
    seen: set[str] = set()
    for i, t in enumerate(items, start=1):
        name = _require_str(t.get("name"), what=f"plugins[{i}].name")
        url = _require_str(t.get("url") or t.get("repo"), what=f"plugins[{i}].url")
        if name in seen:
            raise ConfigError(f"Duplicate plugin name: {name}")
        seen.add(name)
        out.append(PluginSource(name=name, url=url))
    return out


def _parse_enable(value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(x, str) and x for x in value):
        raise ConfigError("'enable' must be a list of non-empty strings")
    return list(value)


def _normalize_top_level(obj: Any) -> tuple[list[PluginSource] | None, list[str] | None, Path | None]:
    if obj is None:
        return None, None, None
    if not isinstance(obj, dict):
        raise ConfigError("Config must be a table with any of: plugins, enable, zsh_custom.")

    extra_keys = set(obj.keys()) - {"plugins", "enable", "zsh_custom"}
    if extra_keys:
        extra = ", ".join(sorted(extra_keys))
        raise ConfigError(f"Unknown top-level keys: {extra}")

    plugins = _parse_plugins(obj["plugins"]) if "plugins" in obj else None
    enable = _parse_enable(obj["enable"]) if "enable" in obj else None
    zsh_custom = None
    if "zsh_custom" in obj:
        zsh_custom = expand_path(_require_str(obj["zsh_custom"], what="zsh_custom"))
    return plugins, enable, zsh_custom


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ConfigError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    try:
        import tomllib
    except ImportError:  # pragma: no cover
        import tomli as tomllib  # type: ignore[no-redef]
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    import yaml

    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ConfigError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def load_config_file(path: Path) -> LoadedConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    suffix = path.suffix.lower()

    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
    else:
        raise ConfigError(
            f"Unsupported config format for {path} (expected .json, .toml, .yaml, .yml)."
        )

    try:
        plugins, enable, zsh_custom = _normalize_top_level(raw)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e
    return LoadedConfig(path=path, plugins=plugins, enable=enable, zsh_custom=zsh_custom)
