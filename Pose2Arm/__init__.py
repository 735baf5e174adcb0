"""Orientation arm model for 3DoF hand controllers."""

__version__ = "0.1.0"
