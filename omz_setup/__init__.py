"""Provision zsh + Oh My Zsh + plugins on the local machine."""

__version__ = "0.1.0"
