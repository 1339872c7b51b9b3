"""Bagyo Watch: storm threat assessment and projection service."""

__version__ = "0.1.0"
