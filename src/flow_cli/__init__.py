"""Flow CLI - a terminal focus timer."""

__version__ = "0.3.0"
