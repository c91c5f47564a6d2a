"""Firestore document values, object serialization, query and transform models, and errors."""

__version__ = "0.1.0"