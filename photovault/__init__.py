"""PhotoVault: personal photo storage and album sharing backend."""

__version__ = "0.1.0"
