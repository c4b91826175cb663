"""Aggregated video search across many upstream sites."""

__version__ = "1.0.0"
