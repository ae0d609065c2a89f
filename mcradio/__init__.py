"""Multicast radio: MP3 channel streaming server, player client and their building blocks."""

__version__ = "0.1.0"

__all__ = ["__version__"]