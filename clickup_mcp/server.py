"""ClickUp MCP server entry point.

Exposes ClickUp tasks, lists, comments, time tracking, docs and chat as MCP
tools over stdio, authenticated with a personal API token. Run
``clickup_onboarding`` once to configure; no environment variable is required.
"""

import logging
import os
import sys

from clickup_mcp import tools  # noqa: F401  (registers tools)
from clickup_mcp.app import mcp

LOG_LEVEL = os.getenv("CLICKUP_MCP_LOG_LEVEL", "INFO")


def main() -> None:
    # stdout carries the MCP protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
