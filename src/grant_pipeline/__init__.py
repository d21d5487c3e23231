"""Grant pipeline data access and dashboard views."""

__version__ = "0.1.0"
