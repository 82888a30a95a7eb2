"""Slack Web API gateway.

Every handler talks to Slack through SlackClient.request(). It owns:
- credential choice (bot token vs. user token) per call
- default JSON headers, left off for multipart bodies or caller-supplied headers
- request/response logging (bodies only at DEBUG)
- the ok-in-body convention: Slack answers HTTP 200 with ``{"ok": false, ...}``
  for logical failures. Those come back as a SlackResponse, never as an
  exception. Only transport-level failures raise SlackTransportError.
"""
import enum
import json
import logging
from typing import Any, Mapping, Optional

import httpx

from .config import DEFAULT_API_BASE_URL
from .errors import SlackTransportError

logger = logging.getLogger("slack-mcp.client")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class Credential(str, enum.Enum):
    """Which bearer token a call is made with."""

    BOT = "bot"    # primary, SLACK_BOT_TOKEN
    USER = "user"  # elevated, SLACK_USER_TOKEN


class SlackResponse:
    """Decoded Slack API response.

    Wraps the JSON body verbatim; ``ok`` false means Slack reported a logical
    failure that should flow back to the caller as data.
    """

    def __init__(self, status_code: int, data: dict[str, Any]):
        self.status_code = status_code
        self.data = data

    @property
    def ok(self) -> bool:
        return bool(self.data.get("ok"))

    @property
    def error(self) -> Optional[str]:
        return self.data.get("error")

    @property
    def needed(self) -> Optional[str]:
        return self.data.get("needed")

    @property
    def provided(self) -> Optional[str]:
        return self.data.get("provided")

    @property
    def warning(self) -> Optional[str]:
        return self.data.get("warning")

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __repr__(self) -> str:
        return f"SlackResponse(status_code={self.status_code}, ok={self.ok}, error={self.error!r})"


def clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """Drop None values and stringify the rest for a query string."""
    cleaned: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned


class SlackClient:
    """Async client for the Slack Web API.

    Usage:
        async with SlackClient(bot_token, user_token=...) as slack:
            response = await slack.request("POST", "chat.postMessage", json={...})
    """

    def __init__(
        self,
        bot_token: str,
        user_token: Optional[str] = None,
        team_id: Optional[str] = None,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._tokens = {Credential.BOT: bot_token, Credential.USER: user_token}
        self.team_id = team_id
        self.base_url = base_url.rstrip("/")
        # No default Authorization header: the external upload URL must not receive it
        self.http = http or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings, http: Optional[httpx.AsyncClient] = None) -> "SlackClient":
        return cls(
            bot_token=settings.bot_token,
            user_token=settings.user_token,
            team_id=settings.team_id,
            base_url=settings.api_base_url,
            timeout=settings.http_timeout,
            http=http,
        )

    async def __aenter__(self) -> "SlackClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    def has_credential(self, credential: Credential) -> bool:
        return bool(self._tokens.get(credential))

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def build_headers(
        self,
        credential: Credential = Credential.BOT,
        headers: Optional[Mapping[str, str]] = None,
        multipart: bool = False,
    ) -> dict[str, str]:
        """Authorization plus default JSON content type.

        Caller-supplied headers replace the JSON default entirely; multipart
        bodies get no Content-Type so httpx can set the boundary.
        """
        token = self._tokens.get(credential)
        result = {"Authorization": f"Bearer {token}"}
        if headers is not None:
            result.update(headers)
        elif not multipart:
            result["Content-Type"] = JSON_CONTENT_TYPE
        return result

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        credential: Credential = Credential.BOT,
        json: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        files: Optional[Any] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> SlackResponse:
        """Issue one Slack API call and decode the JSON body.

        Raises:
            SlackTransportError: network failure, timeout or non-JSON body.
        """
        url = self.url_for(endpoint)
        query = clean_params(params)
        request_headers = self.build_headers(credential, headers, multipart=files is not None)

        self._log_request(method, url, credential, query, json, files)

        try:
            response = await self.http.request(
                method,
                url,
                params=query or None,
                json=json,
                files=files,
                headers=request_headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {type(e).__name__}: {e}")
            raise SlackTransportError(f"Request to {url} failed: {type(e).__name__}: {e}", url=url) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(
                f"{method} {url} returned a non-JSON body (HTTP {response.status_code}): "
                f"{response.text[:200]!r}"
            )
            raise SlackTransportError(
                f"Slack returned a non-JSON response (HTTP {response.status_code}) for {url}",
                url=url,
            ) from e

        if not isinstance(data, dict):
            raise SlackTransportError(f"Slack returned an unexpected JSON document for {url}", url=url)

        result = SlackResponse(response.status_code, data)
        self._log_response(method, url, result)
        return result

    async def get(self, endpoint: str, **kwargs) -> SlackResponse:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs) -> SlackResponse:
        return await self.request("POST", endpoint, **kwargs)

    def _log_request(self, method, url, credential, query, body, files) -> None:
        logger.info(f"Slack API request: {method} {url} ({credential.value} token)")
        if logger.isEnabledFor(logging.DEBUG):
            if query:
                logger.debug(f"  Params: {query}")
            if body is not None:
                logger.debug(f"  Body: {json.dumps(body, ensure_ascii=False)}")
            if files is not None:
                logger.debug(f"  Multipart fields: {list(dict(files))}")

    def _log_response(self, method: str, url: str, response: SlackResponse) -> None:
        if not response.ok or response.status_code >= 400:
            logger.error(
                f"Slack API error response: {method} {url} "
                f"(HTTP {response.status_code}, error={response.error})"
            )
            if response.needed or response.provided:
                logger.error(f"  Scopes needed: {response.needed}, provided: {response.provided}")
        else:
            logger.info(f"Slack API response: {method} {url} (HTTP {response.status_code}, ok)")
        if response.warning:
            logger.warning(f"  Slack warning: {response.warning}")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"  Response body: {json.dumps(response.data, ensure_ascii=False)}")
