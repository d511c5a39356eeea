"""Price-list search MCP server for electronics resellers."""

__version__ = "0.3.0"
