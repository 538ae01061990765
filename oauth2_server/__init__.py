"""OAuth 2 authorization-code grant server."""

__version__ = "0.1.0"
