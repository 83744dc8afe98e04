"""Switchboard — process orchestration for command-line AI agents."""

__version__ = "0.1.0"
