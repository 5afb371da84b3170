"""Questlog - track your game library, playtime and achievements."""

__version__ = "0.1.0"
