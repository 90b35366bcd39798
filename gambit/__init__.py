"""Gambit: a chess rules engine with a minimax opponent."""

__version__ = "1.0.0"
