"""izi: command-line client for the gitizi.com prompt service."""

__version__ = "1.0.0"
