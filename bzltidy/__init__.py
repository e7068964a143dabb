"""Configuration, validation, diagnostics, file discovery and diff helpers for Starlark build files."""

__version__ = "0.1.0"