"""Starbucks ordering over browser automation, exposed as MCP tools."""

__version__ = "1.0.0"
