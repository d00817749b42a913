"""Namewise - rank identifier names by how natural they look in their context."""

__version__ = "0.1.0"
