"""One-way synchronization of a local todo list with a remote todo service."""

__version__ = "0.1.0"
