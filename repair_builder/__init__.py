"""Policies & procedures builder for home repair programs."""

__version__ = "1.7.7"
