"""Walkthrough of the MongoDB driver: connect, write, read, aggregate, index and transact."""

__version__ = "1.0.0"
