"""A TCP file server and client for writing, fetching, removing and listing files."""

__version__ = "0.1.0"
__all__ = ["client", "permissions", "server"]