"""Tests for the MCP server wiring."""
import asyncio
import json
import logging
import os
import signal
import sys
from contextlib import asynccontextmanager

import pytest
from mcp import types

from slack_mcp import server, tools
from slack_mcp.config import Settings
from slack_mcp.resilience import HarnessState, ResilienceHarness
from slack_mcp.server import LOG_FORMAT, configure_logging, create_server


class TestServerHandlers:
    """Protocol requests are answered from the catalog and the dispatcher."""

    @pytest.mark.asyncio
    async def test_list_tools(self, dispatcher):
        app = create_server(dispatcher)

        result = await app.request_handlers[types.ListToolsRequest](types.ListToolsRequest(method="tools/list"))

        assert [t.name for t in result.root.tools] == [t.name for t in tools.get_tools()]

    @pytest.mark.asyncio
    async def test_prompts_and_resources_are_empty(self, dispatcher):
        app = create_server(dispatcher)

        prompts = await app.request_handlers[types.ListPromptsRequest](types.ListPromptsRequest(method="prompts/list"))
        resources = await app.request_handlers[types.ListResourcesRequest](
            types.ListResourcesRequest(method="resources/list")
        )

        assert prompts.root.prompts == []
        assert resources.root.resources == []

    @pytest.mark.asyncio
    async def test_call_tool_goes_through_dispatcher(self, dispatcher, fake_slack):
        app = create_server(dispatcher)
        fake_slack.reply({"ok": True, "ts": "1234567890.123456"})
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(
                name="slack_post_message",
                arguments={"channel_id": "C1", "text": "hello"},
            ),
        )

        result = await app.request_handlers[types.CallToolRequest](request)

        assert json.loads(result.root.content[0].text) == {"ok": True, "ts": "1234567890.123456"}

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_a_tool_result(self, dispatcher, fake_slack):
        """Validation failures come from the dispatcher, not the protocol layer."""
        app = create_server(dispatcher)
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="slack_post_message", arguments={"channel_id": "C1"}),
        )

        result = await app.request_handlers[types.CallToolRequest](request)

        payload = json.loads(result.root.content[0].text)
        assert payload["tool"] == "slack_post_message"
        assert "text" in payload["error"]
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("tool_name", ["slack_list_channels", "slack_post_message"])
    async def test_absent_arguments_over_protocol(self, dispatcher, fake_slack, tool_name):
        """A tools/call without an arguments object never reaches Slack."""
        app = create_server(dispatcher)
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name=tool_name, arguments=None),
        )

        result = await app.request_handlers[types.CallToolRequest](request)

        payload = json.loads(result.root.content[0].text)
        assert payload == {"error": "No arguments provided", "tool": tool_name}
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_empty_arguments_still_call_slack(self, dispatcher, fake_slack):
        app = create_server(dispatcher)
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="slack_list_channels", arguments={}),
        )

        result = await app.request_handlers[types.CallToolRequest](request)

        assert json.loads(result.root.content[0].text) == {"ok": True}
        assert fake_slack.paths == ["/api/conversations.list"]


class TestLogging:
    def test_configure_logging_targets_stderr(self):
        configure_logging(logging.DEBUG)
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert root.handlers[0].formatter._fmt == LOG_FORMAT
        configure_logging()


@pytest.mark.skipif(sys.platform == "win32", reason="uses loop.add_signal_handler")
class TestMainShutdown:
    """A shutdown signal lets main() close the Slack client and return."""

    @pytest.mark.asyncio
    async def test_sigterm_returns_cleanly(self, monkeypatch):
        running = asyncio.Event()
        clients = []

        class IdleServer:
            def create_initialization_options(self):
                return None

            async def run(self, read_stream, write_stream, options):
                running.set()
                await asyncio.sleep(3600)

        def build_server(dispatcher):
            clients.append(dispatcher.slack)
            return IdleServer()

        @asynccontextmanager
        async def no_stdio():
            yield None, None

        monkeypatch.setattr(server, "create_server", build_server)
        monkeypatch.setattr(server, "stdio_server", no_stdio)
        harness = ResilienceHarness(shutdown_grace=30.0)
        settings = Settings(bot_token="xoxb-1", team_id="T1")

        task = asyncio.create_task(server.main(settings, harness))
        await running.wait()
        os.kill(os.getpid(), signal.SIGTERM)

        assert await task is None
        assert harness.state is HarnessState.TERMINATED
        assert harness.exit_code == 0
        assert clients[0].http.is_closed
