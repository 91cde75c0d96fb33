"""Rabbit Care: the game-state engine behind a virtual-pet care game."""

__version__ = "0.3.0"
