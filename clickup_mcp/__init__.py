"""ClickUp MCP — local server exposing ClickUp to an AI agent via a personal API key."""

__version__ = "1.0.0"
