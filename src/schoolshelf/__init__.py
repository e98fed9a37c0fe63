"""School digital library backend."""

__version__ = "0.1.0"
