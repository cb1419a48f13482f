"""Bit streams, encoded floats, allocators and buffered readers for Source engine demo data."""

__version__ = "0.1.0"
__all__ = ["__version__"]