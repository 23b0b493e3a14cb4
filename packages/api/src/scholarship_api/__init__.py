# This project was developed with assistance from AI tools.
"""Scholarship administration API."""

__version__ = "0.1.0"
