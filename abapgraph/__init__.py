"""Dependency graph engine for documenting ABAP repository objects."""

__version__ = "0.1.0"
