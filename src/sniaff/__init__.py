"""sniaff - session lifecycle coordination for sniaff worker processes."""

__version__ = "0.1.0"
