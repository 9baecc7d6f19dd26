"""Configuration, repository registry and credential tooling for syncing Git repositories across providers."""

__version__ = "0.1.0"