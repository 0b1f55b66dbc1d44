"""Collab Engine - creator/brand campaign matching and admin intelligence."""

__version__ = "1.0.0"
