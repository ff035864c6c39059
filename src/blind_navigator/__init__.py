"""Perception-to-instruction engine for door-finding navigation."""

__version__ = "0.1.0"
