"""Exception taxonomy for the Slack MCP server.

Every exception raised on the dispatch path derives from SlackMCPError so the
dispatcher can turn it into a structured tool result. Slack's own logical
failures (``ok: false``) are NOT exceptions - see client.SlackResponse.
"""
from typing import Iterable, Optional


class SlackMCPError(Exception):
    """Base class for errors surfaced to the calling assistant."""


class ConfigurationError(SlackMCPError):
    """Raised at startup when required environment configuration is missing."""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        super().__init__(message)
        self.missing = list(missing)


class InvalidInvocation(SlackMCPError):
    """Raised when a tool call arrives without any arguments."""


class UnknownTool(SlackMCPError):
    """Raised when the requested tool name is not registered."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class MissingArgument(SlackMCPError):
    """Raised when one or more required arguments are absent or empty."""

    def __init__(self, fields: Iterable[str], hint: Optional[str] = None):
        self.fields = list(fields)
        noun = "argument" if len(self.fields) == 1 else "arguments"
        message = f"Missing required {noun}: {', '.join(self.fields)}"
        if hint:
            message += f" ({hint})"
        super().__init__(message)


class InvalidArgument(SlackMCPError):
    """Raised when arguments are present but violate the tool's schema."""


class CredentialUnavailable(SlackMCPError):
    """Raised when a tool needs the user token and none is configured."""

    def __init__(self, tool_name: str):
        super().__init__(
            f"{tool_name} requires SLACK_USER_TOKEN, which is not configured"
        )
        self.tool_name = tool_name


class SlackTransportError(SlackMCPError):
    """Raised when talking to Slack fails below the JSON API convention.

    Covers network errors, timeouts and response bodies that are not JSON.
    """

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class UploadTransferError(SlackTransportError):
    """Raised when the byte transfer step of an external upload is rejected."""

    def __init__(self, status_code: int, reason: str, url: str, file_id: Optional[str] = None):
        super().__init__(f"Upload failed: HTTP {status_code} {reason}".rstrip(), url=url)
        self.status_code = status_code
        self.file_id = file_id
