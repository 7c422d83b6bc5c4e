"""Seafood batch costing and financial analysis engine."""

__version__ = "0.1.0"
