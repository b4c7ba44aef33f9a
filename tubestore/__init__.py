"""WSGI server and SQLite storage for video metadata, users and assets."""

__version__ = "0.1.0"

__all__ = ["__version__"]