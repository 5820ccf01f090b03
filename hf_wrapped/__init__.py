"""Hugging Face Wrapped: a year-in-review for Hub users and organizations."""

__version__ = "0.1.0"
