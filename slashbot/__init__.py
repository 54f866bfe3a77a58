"""Slash-command bot for GitHub pull request comments."""

__version__ = "0.1.0"
