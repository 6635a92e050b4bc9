"""MCP tool server for the backend side."""
