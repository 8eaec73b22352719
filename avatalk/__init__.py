"""Avatalk - voice-driven avatar interaction client."""

__version__ = "0.1.0"
