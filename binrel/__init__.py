"""Release pipeline for the desktop binary."""

__version__ = "0.1.0"
