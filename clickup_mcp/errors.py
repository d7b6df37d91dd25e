"""Error kinds raised by the ClickUp MCP server.

Tools let these propagate; FastMCP reports them to the host as error results
with the message intact.
"""

ONBOARDING_HINT = "Run clickup_onboarding with your api_key first."


class ClickUpError(Exception):
    """Base class for all errors raised by this package."""


class InvalidCredential(ClickUpError):
    """The API rejected the personal token during validation."""

    def __init__(self, detail: str):
        super().__init__(f"Invalid ClickUp API key: {detail}")
        self.detail = detail


class NoWorkspaces(ClickUpError):
    def __init__(self) -> None:
        super().__init__("No workspaces found for this API key. Check your account.")


class NotConfigured(ClickUpError):
    """An operation needs persisted state (key, workspace, config) that doesn't exist."""

    def __init__(self, what: str = "No configuration found."):
        super().__init__(f"{what} {ONBOARDING_HINT}")


class NoListConfigured(ClickUpError):
    def __init__(self) -> None:
        super().__init__(
            "No list_id provided and no default list configured. "
            "Run clickup_onboarding first."
        )


class RemoteCallFailed(ClickUpError):
    """Upstream failure: an HTTP error status or a transport error."""

    def __init__(self, detail: str, status_code: int | None = None, api: str = "ClickUp API"):
        prefix = f"{api} {status_code}" if status_code is not None else api
        super().__init__(f"{prefix}: {detail}")
        self.detail = detail
        self.status_code = status_code
