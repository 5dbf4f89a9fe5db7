"""Symvora symptom advisory service."""

__version__ = "1.0.0"
