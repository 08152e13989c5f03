"""Build tasks for the njord CSS library."""

__version__ = "0.1.0"
