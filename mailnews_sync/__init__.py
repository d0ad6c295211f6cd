"""Outlook mail + news article sync backend."""

__version__ = "0.1.0"
