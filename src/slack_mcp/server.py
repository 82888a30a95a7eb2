"""Slack MCP Server - Expose a Slack workspace to AI assistants over stdio."""
import sys
import asyncio
import logging
import traceback
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp import types
from mcp.types import Prompt, Resource, TextContent, Tool

from . import __version__
from . import tools
from .client import SlackClient
from .config import Settings, load_settings
from .dispatcher import Dispatcher
from .errors import ConfigurationError
from .resilience import HarnessState, ResilienceHarness

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger("slack-mcp")


def configure_logging(level: int = logging.INFO) -> None:
    """Send all logging to stderr; stdout carries the protocol."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True
    )


def create_server(dispatcher: Dispatcher) -> Server:
    """Build the MCP server and bind its request handlers to ``dispatcher``."""
    app = Server("slack-mcp", version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools for the Slack workspace."""
        return tools.get_tools()

    # Argument validation is owned by the dispatcher so failures come back
    # as structured results rather than protocol errors.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> list[TextContent]:
        """Handle MCP tool calls by delegating to the dispatcher."""
        return await dispatcher.dispatch(name, arguments)

    @app.list_prompts()
    async def list_prompts() -> list[Prompt]:
        return []

    @app.list_resources()
    async def list_resources() -> list[Resource]:
        return []

    # The mcp library replaces absent arguments with {} before call_tool runs;
    # route those requests to the dispatcher untouched.
    handle_call_tool = app.request_handlers[types.CallToolRequest]

    async def call_tool_request(req: types.CallToolRequest) -> types.ServerResult:
        if req.params.arguments is None:
            content = await dispatcher.dispatch(req.params.name, None)
            return types.ServerResult(types.CallToolResult(content=content, isError=False))
        return await handle_call_tool(req)

    app.request_handlers[types.CallToolRequest] = call_tool_request

    return app


async def main(settings: Optional[Settings] = None, harness: Optional[ResilienceHarness] = None):
    """Run the MCP server on stdio until the client disconnects."""
    settings = settings or load_settings()
    harness = harness or ResilienceHarness()

    logger.info(f"MCP Server starting with SLACK_API_BASE_URL: {settings.api_base_url}")
    if settings.has_user_token:
        logger.info("MCP Server configured with SLACK_USER_TOKEN for elevated operations")
    else:
        logger.warning(
            "SLACK_USER_TOKEN is not set: file uploads, search, reminders and "
            "canvas delete/access tools will return an error"
        )

    try:
        async with SlackClient.from_settings(settings) as slack:
            app = create_server(Dispatcher(slack))
            try:
                async with stdio_server() as (read_stream, write_stream):
                    harness.install()
                    logger.info("Slack MCP Server running on stdio")
                    await app.run(read_stream, write_stream, app.create_initialization_options())
            finally:
                harness.uninstall()
    except asyncio.CancelledError:
        # A shutdown signal cancels this task; anything else is a real cancellation
        if harness.state is not HarnessState.TERMINATED or harness.exit_code != 0:
            raise
        logger.info("Shutdown complete")
        return
    logger.info("Client disconnected, server stopped")


def run() -> None:
    """Console entry point: load configuration, then serve until told to stop."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.logging_level)
    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error in main(): {type(e).__name__}: {e}")
        logger.error(f"  Traceback:\n{traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    run()
