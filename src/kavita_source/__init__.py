"""Kavita content-source adapter."""

__version__ = "1.0.1"
