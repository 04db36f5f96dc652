"""Simplo Pages - landing page builder and lead capture service."""

__version__ = "1.0.0"
