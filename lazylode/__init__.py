"""lazylode - keyboard-driven terminal database explorer."""

__version__ = "0.3.0"
