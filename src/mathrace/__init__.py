"""Race-simulation core for a multiplication-table racing game."""

__version__ = "0.1.0"
