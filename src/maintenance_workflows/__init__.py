"""Maintenance workflows: self-validating actions with failure propagation."""

__version__ = "0.1.0"
