from __future__ import annotations

import argparse
import logging
from pathlib import Path

from omz_setup.config_loader import load_config_file
from omz_setup.core import Options, build_context
from omz_setup.settings import Settings
from omz_setup.steps import run_steps
from omz_setup.util import CommandError, SetupError


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("omz-setup")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def main(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="omz-setup",
        description="Install zsh, Oh My Zsh and a set of plugins, then wire them into ~/.zshrc.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional *.json, *.toml, *.yaml or *.yml file overriding 'plugins', 'enable' and 'zsh_custom'.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log actions but do not change the system.",
    )
    parser.add_argument(
        "--skip-chsh",
        action="store_true",
        help="Leave the login shell unchanged.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )
    args = parser.parse_args(argv)

    logger = _setup_logger(args.verbose)

    if settings is None:
        settings = Settings.from_env()
    if args.config is not None:
        try:
            loaded = load_config_file(args.config)
            settings = loaded.apply(settings)
        except ValueError as e:
            logger.error("Failed to load config @ %s: %s", args.config, e)
            return 2

    options = Options(dry_run=bool(args.dry_run), skip_chsh=bool(args.skip_chsh))
    ctx = build_context(settings=settings, options=options, logger=logger)

    logger.debug("ZSH_CUSTOM=%s", settings.zsh_custom)
    logger.debug("Plugins: %s", ", ".join(p.name for p in settings.plugins) or "(none)")

    try:
        run_steps(ctx)
    except (SetupError, CommandError) as e:
        logger.error("%s", e)
        return 1

    logger.info("All installations and configurations are complete.")
    logger.info("If the default shell was changed, please log out and log back in for it to take effect.")
    return 0
