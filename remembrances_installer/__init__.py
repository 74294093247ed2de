"""Remembrances-MCP installer: platform-aware binary selection and setup."""

__version__ = "0.1.0"
