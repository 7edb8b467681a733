"""Success CLI - alternate goal sessions and rewards with a countdown timer."""

__version__ = "0.4.0"
