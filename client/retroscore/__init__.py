"""Async client for the RetroScore match prediction game."""

__version__ = "0.3.0"
