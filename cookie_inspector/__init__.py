"""Passive cookie and credential-leak analysis."""

__version__ = "0.1.0"
