"""Tests for tool dispatch and per-call error isolation."""
import logging

import httpx
import pytest

from slack_mcp.client import Credential
from slack_mcp.dispatcher import TRANSPORT_HINT, Dispatcher
from slack_mcp.errors import InvalidInvocation, MissingArgument, UnknownTool
from slack_mcp.handlers import HANDLERS, ToolHandler
from slack_mcp.schemas import ListChannelsArgs, PostMessageArgs

from conftest import BOT_TOKEN, TEAM_ID, result_payload


class TestInvocationErrors:
    """Bad invocations never reach Slack and never raise."""

    @pytest.mark.asyncio
    async def test_absent_arguments(self, dispatcher, fake_slack):
        """A call without any arguments object is rejected."""
        payload = result_payload(await dispatcher.dispatch("slack_post_message", None))

        assert payload == {"error": "No arguments provided", "tool": "slack_post_message"}
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_unknown_tool(self, dispatcher, fake_slack):
        """Unregistered tool names produce an error naming the tool."""
        payload = result_payload(await dispatcher.dispatch("slack_does_not_exist", {}))

        assert payload["error"] == "Unknown tool: slack_does_not_exist"
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_missing_required_field(self, dispatcher, fake_slack):
        """post_message without text fails before any HTTP call."""
        payload = result_payload(await dispatcher.dispatch("slack_post_message", {"channel_id": "C123"}))

        assert "text" in payload["error"]
        assert "channel_id" not in payload["error"]
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_empty_string_counts_as_missing(self, dispatcher, fake_slack):
        payload = result_payload(
            await dispatcher.dispatch("slack_post_message", {"channel_id": "", "text": ""})
        )

        assert payload["error"] == "Missing required arguments: channel_id, text"
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_schema_violation(self, dispatcher, fake_slack):
        """Arguments that are present but contradictory are rejected."""
        payload = result_payload(await dispatcher.dispatch("slack_canvas_access_set", {
            "canvas_id": "F123",
            "access_level": "read",
            "channel_ids": ["C1"],
            "user_ids": ["U1"],
        }))

        assert "Cannot specify both channel_ids and user_ids" in payload["error"]
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_wrong_enum_value(self, dispatcher, fake_slack):
        payload = result_payload(await dispatcher.dispatch("slack_canvas_access_set", {
            "canvas_id": "F123",
            "access_level": "admin",
        }))

        assert payload["error"].startswith("Invalid arguments: access_level")
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_user_token_not_configured(self, bot_only_slack, fake_slack):
        """Tools needing the user token fail cleanly when it is absent."""
        dispatcher = Dispatcher(bot_only_slack)

        payload = result_payload(await dispatcher.dispatch("slack_search_messages", {"query": "deploy"}))

        assert payload["error"] == "slack_search_messages requires SLACK_USER_TOKEN, which is not configured"
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_resolve_raises_typed_errors(self, dispatcher):
        """resolve() is the raising half of dispatch()."""
        with pytest.raises(InvalidInvocation):
            dispatcher.resolve("slack_post_message", None)
        with pytest.raises(UnknownTool) as exc_info:
            dispatcher.resolve("nope", {})
        assert exc_info.value.tool_name == "nope"
        with pytest.raises(MissingArgument) as exc_info:
            dispatcher.resolve("slack_reply_to_thread", {"channel_id": "C1"})
        assert exc_info.value.fields == ["thread_ts", "text"]


class TestSuccessfulCalls:
    """Successful and logically-failed calls pass Slack's body through."""

    @pytest.mark.asyncio
    async def test_post_message_end_to_end(self, dispatcher, fake_slack):
        """The result text is exactly Slack's JSON body."""
        fake_slack.reply({"ok": True, "ts": "1234567890.123456"})

        payload = result_payload(
            await dispatcher.dispatch("slack_post_message", {"channel_id": "C123", "text": "hello"})
        )

        assert payload == {"ok": True, "ts": "1234567890.123456"}
        assert len(fake_slack.requests) == 1
        request = fake_slack.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://slack.com/api/chat.postMessage"
        assert request.headers["Authorization"] == f"Bearer {BOT_TOKEN}"
        assert request.headers["Content-Type"] == "application/json; charset=utf-8"
        assert fake_slack.json_body() == {"channel": "C123", "text": "hello"}

    @pytest.mark.asyncio
    async def test_slack_logical_failure_is_data(self, dispatcher, fake_slack):
        """ok:false comes back verbatim, not as an error payload."""
        body = {"ok": False, "error": "channel_not_found"}
        fake_slack.reply(body)

        payload = result_payload(
            await dispatcher.dispatch("slack_post_message", {"channel_id": "C404", "text": "hello"})
        )

        assert payload == body

    @pytest.mark.asyncio
    async def test_list_channels_clamps_limit(self, dispatcher, fake_slack):
        await dispatcher.dispatch("slack_list_channels", {"limit": 1000})

        params = fake_slack.requests[0].url.params
        assert params["limit"] == "200"
        assert params["team_id"] == TEAM_ID
        assert params["types"] == "public_channel,private_channel"
        assert params["exclude_archived"] == "true"
        assert "cursor" not in params

    @pytest.mark.asyncio
    async def test_list_channels_defaults(self, dispatcher, fake_slack):
        """Empty arguments are valid for tools without required fields."""
        await dispatcher.dispatch("slack_list_channels", {})

        assert fake_slack.requests[0].url.params["limit"] == "100"

    @pytest.mark.asyncio
    async def test_files_list_uses_aliased_fields(self, dispatcher, fake_slack):
        await dispatcher.dispatch("slack_files_list", {"channel": "C1", "from": 1700000000, "to": 1700001000})

        params = fake_slack.requests[0].url.params
        assert fake_slack.paths == ["/api/files.list"]
        assert params["ts_from"] == "1700000000"
        assert params["ts_to"] == "1700001000"

    @pytest.mark.asyncio
    async def test_files_list_keeps_fractional_timestamps(self, dispatcher, fake_slack):
        await dispatcher.dispatch("slack_files_list", {"from": 1700000000.5})

        assert fake_slack.requests[0].url.params["ts_from"] == "1700000000.5"

    @pytest.mark.asyncio
    async def test_reactions_get_full_only_when_requested(self, dispatcher, fake_slack):
        await dispatcher.dispatch("slack_reactions_get", {"channel": "C1", "timestamp": "1.2"})
        await dispatcher.dispatch("slack_reactions_get", {"channel": "C1", "timestamp": "1.2", "full": True})

        assert "full" not in fake_slack.requests[0].url.params
        assert fake_slack.requests[1].url.params["full"] == "true"

    @pytest.mark.asyncio
    async def test_canvas_create_sends_only_provided_fields(self, dispatcher, fake_slack):
        await dispatcher.dispatch("slack_canvas_create", {"title": "Notes"})

        assert fake_slack.json_body() == {"title": "Notes"}


class TestFaultIsolation:
    """Failures inside a handler become error payloads."""

    @pytest.mark.asyncio
    async def test_malformed_arguments_with_debug_logging(self, dispatcher, fake_slack, caplog):
        """Arguments that are not a mapping still produce a result at DEBUG level."""
        caplog.set_level(logging.DEBUG, logger="slack-mcp.dispatcher")

        payload = result_payload(await dispatcher.dispatch("slack_list_channels", ["not", "a", "mapping"]))

        assert payload["tool"] == "slack_list_channels"
        assert payload["error"]
        assert fake_slack.requests == []

    @pytest.mark.asyncio
    async def test_transport_failure(self, dispatcher, fake_slack):
        fake_slack.reply(httpx.ConnectError("connection refused"))

        payload = result_payload(
            await dispatcher.dispatch("slack_post_message", {"channel_id": "C1", "text": "hi"})
        )

        assert payload["tool"] == "slack_post_message"
        assert "ConnectError" in payload["error"]
        assert payload["hint"] == TRANSPORT_HINT

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self, slack, fake_slack):
        """A crashing handler does not affect the next call."""

        async def explode(args, client):
            raise RuntimeError("handler blew up")

        registry = dict(HANDLERS)
        registry["slack_explode"] = ToolHandler("slack_explode", ListChannelsArgs, explode, Credential.BOT)
        dispatcher = Dispatcher(slack, registry=registry)

        payload = result_payload(await dispatcher.dispatch("slack_explode", {}))
        assert payload == {"error": "handler blew up", "tool": "slack_explode"}

        fake_slack.reply({"ok": True, "ts": "1.1"})
        payload = result_payload(
            await dispatcher.dispatch("slack_post_message", {"channel_id": "C1", "text": "still alive"})
        )
        assert payload == {"ok": True, "ts": "1.1"}

    @pytest.mark.asyncio
    async def test_custom_registry_is_isolated(self, slack):
        """A dispatcher only knows the handlers it was given."""
        registry = {"slack_post_message": ToolHandler("slack_post_message", PostMessageArgs, HANDLERS["slack_post_message"].func)}
        dispatcher = Dispatcher(slack, registry=registry)

        payload = result_payload(await dispatcher.dispatch("slack_list_channels", {}))

        assert payload["error"] == "Unknown tool: slack_list_channels"
