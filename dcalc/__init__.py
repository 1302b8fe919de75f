"""Dice calculator: a small language for computing with discrete probability distributions."""

__version__ = "0.1.0"
