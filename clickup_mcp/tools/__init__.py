"""MCP tool modules. Importing this package registers every tool on ``app.mcp``."""

from clickup_mcp.tools import chat, comments, documents, onboarding, tasks, timetracking, workspace

__all__ = ["chat", "comments", "documents", "onboarding", "tasks", "timetracking", "workspace"]
