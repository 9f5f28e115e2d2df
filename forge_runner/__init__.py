"""forge-runner — install a pinned forge and run its test cycle."""

__version__ = "0.1.0"
