"""Alternate MCP transports."""
