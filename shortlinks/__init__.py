"""Shortlinks - in-memory URL shortening service."""

__version__ = "0.1.0"
