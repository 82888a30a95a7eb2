"""Tool dispatch with per-call error isolation.

Dispatcher.dispatch() maps {tool name, arguments} to exactly one list of
TextContent. Nothing raised while validating, calling Slack or uploading
escapes it: every failure becomes a ``{"error": ..., "tool": ...}`` payload so
one bad call never takes the stdio server down.
"""
import json
import logging
import traceback
from typing import Any, Mapping, Optional

import httpx
from mcp.types import TextContent

from . import handlers as handler_registry
from .client import Credential, SlackClient
from .errors import (
    CredentialUnavailable,
    InvalidInvocation,
    SlackMCPError,
    SlackTransportError,
    UnknownTool,
)
from .schemas import validate_arguments

logger = logging.getLogger("slack-mcp.dispatcher")

TRANSPORT_HINT = "Set LOG_LEVEL=debug to log full request and response bodies."


def text_result(payload: Any) -> list[TextContent]:
    """Wrap a JSON-serializable payload as a single text content part."""
    return [TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))]


def error_payload(tool_name: str, error: BaseException) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": str(error) or type(error).__name__, "tool": tool_name}
    if isinstance(error, (SlackTransportError, httpx.HTTPError)):
        payload["hint"] = TRANSPORT_HINT
    return payload


class Dispatcher:
    """Routes tool calls to registered handlers."""

    def __init__(self, slack: SlackClient, registry: Optional[Mapping[str, handler_registry.ToolHandler]] = None):
        self.slack = slack
        self.registry = registry if registry is not None else handler_registry.HANDLERS

    def resolve(self, name: str, arguments: Optional[Mapping[str, Any]]):
        """Find the handler and validate arguments. No network I/O happens here.

        Raises:
            InvalidInvocation, UnknownTool, MissingArgument, InvalidArgument,
            CredentialUnavailable
        """
        if arguments is None:
            raise InvalidInvocation("No arguments provided")

        handler = self.registry.get(name)
        if handler is None:
            raise UnknownTool(name)

        args = validate_arguments(handler.arguments, dict(arguments))

        if handler.credential is Credential.USER and not self.slack.has_credential(Credential.USER):
            raise CredentialUnavailable(name)

        return handler, args

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]]) -> list[TextContent]:
        """Execute one tool call. Always returns a result, never raises."""
        logger.info(f"Tool call: {name} (arguments {'present' if arguments is not None else 'absent'})")
        try:
            if arguments is not None and logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"  Arguments: {dict(arguments)}")
            handler, args = self.resolve(name, arguments)
            response = await handler(args, self.slack)
        except SlackMCPError as e:
            log = logger.error if isinstance(e, SlackTransportError) else logger.warning
            log(f"Tool {name} failed: {type(e).__name__}: {e}")
            if isinstance(e, SlackTransportError):
                logger.debug(f"  Traceback:\n{traceback.format_exc()}")
            return text_result(error_payload(name, e))
        except Exception as e:
            # Catch-all for unexpected errors
            logger.error(f"Unexpected error during {name} call:")
            logger.error(f"  Error type: {type(e).__name__}")
            logger.error(f"  Error message: {str(e)}")
            logger.error(f"  Traceback:\n{traceback.format_exc()}")
            return text_result(error_payload(name, e))

        if response.ok:
            logger.info(f"Tool {name} completed")
        else:
            logger.info(f"Tool {name} completed with Slack error: {response.error}")
        return text_result(response.data)
