"""Endurance race simulation core with player decision points."""

__version__ = "0.1.0"
