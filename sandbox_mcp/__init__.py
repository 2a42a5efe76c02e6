"""Sandbox MCP: archive transfers to and from remote machines."""

__version__ = "0.1.0"
