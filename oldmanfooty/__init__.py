"""Old Man Footy carnival directory service."""

__version__ = "1.0.0"
