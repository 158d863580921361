"""Turn-based games between a human player and an automated agent."""

__version__ = "0.1.0"
