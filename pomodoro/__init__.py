"""Pomodoro: a Pomodoro / Flowtime desktop timer."""

__version__ = "0.1.0"
