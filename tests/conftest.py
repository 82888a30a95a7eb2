"""Shared fixtures: a SlackClient wired to an in-memory Slack."""
import json
from typing import Optional, Union

import httpx
import pytest
import pytest_asyncio

from slack_mcp.client import SlackClient
from slack_mcp.dispatcher import Dispatcher

BOT_TOKEN = "xoxb-test-bot"
USER_TOKEN = "xoxp-test-user"
TEAM_ID = "T0TEST"
UPLOAD_URL = "https://files.slack.com/upload/v1/ABC123"


class FakeSlack:
    """Records every request and answers from a queue of canned responses.

    Queued items are httpx.Response objects or exceptions to raise. Once the
    queue is empty every request gets ``{"ok": true}``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._queue: list[Union[httpx.Response, Exception]] = []

    def reply(self, *items: Union[httpx.Response, Exception, dict]) -> "FakeSlack":
        for item in items:
            if isinstance(item, dict):
                item = httpx.Response(200, json=item)
            self._queue.append(item)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._queue:
            item = self._queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return httpx.Response(200, json={"ok": True})

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content.decode("utf-8"))


def make_client(fake: FakeSlack, user_token: Optional[str] = USER_TOKEN) -> SlackClient:
    return SlackClient(
        bot_token=BOT_TOKEN,
        user_token=user_token,
        team_id=TEAM_ID,
        http=httpx.AsyncClient(transport=httpx.MockTransport(fake)),
    )


def result_payload(result) -> dict:
    """Decode the single text part of a dispatcher result."""
    assert len(result) == 1
    assert result[0].type == "text"
    return json.loads(result[0].text)


@pytest.fixture
def fake_slack():
    return FakeSlack()


@pytest_asyncio.fixture
async def slack(fake_slack):
    client = make_client(fake_slack)
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def bot_only_slack(fake_slack):
    """A client configured without SLACK_USER_TOKEN."""
    client = make_client(fake_slack, user_token=None)
    yield client
    await client.aclose()


@pytest.fixture
def dispatcher(slack):
    return Dispatcher(slack)
