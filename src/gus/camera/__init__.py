"""Camera module for view and primary ray generation.

Components:
    screen: Eye configuration and Screen sample passes

Pixel coordinates:
    column 0 is the left edge, row 0 the bottom edge
"""

from .screen import Eye, Screen

__all__ = [
    "Eye",
    "Screen",
]
