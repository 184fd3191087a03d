"""A small multiplexed HTTP/1.0 static file server with HTCPCP BREW support."""

__version__ = "0.1.0"
__all__ = ["request", "response", "server"]