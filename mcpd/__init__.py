"""Configuration, execution context, argument handling, filtering and health tracking for MCP servers."""

__version__ = "0.1.0"