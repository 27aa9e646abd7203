"""Stacked workspace management with lane-based commit graphs."""

__version__ = "0.3.0"
