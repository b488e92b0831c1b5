"""Comment notifier: emails document authors when comments are added or updated."""

__version__ = "0.1.0"
