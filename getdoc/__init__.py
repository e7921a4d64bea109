"""getdoc: third-party source context for cargo check diagnostics."""

__version__ = "0.1.0"
