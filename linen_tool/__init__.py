"""Linen service batch tracking and invoicing."""

__version__ = "1.0.0"
