"""MCP server exposing discovered skills."""
