"""Haven: conversation store and analytics backend."""

__version__ = "0.1.0"
