"""Task board client with a read-only list-service data layer."""

__version__ = "0.1.0"
