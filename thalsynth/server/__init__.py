"""MCP server exposing panel synthesis and privacy reporting."""
