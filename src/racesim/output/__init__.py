"""Output formatting for race results."""

from .console import ConsoleOutput

__all__ = ["ConsoleOutput"]
