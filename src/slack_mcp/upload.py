"""Two-phase external file upload (files.getUploadURLExternal flow).

Slack stores file bytes outside its JSON API, so an upload is three strictly
ordered steps:

1. Reserve  - files.getUploadURLExternal returns upload_url + file_id
2. Transfer - raw bytes POSTed straight to upload_url (no bearer token)
3. Finalize - files.completeUploadExternal attaches title/channel/comment

Steps 1 and 3 follow Slack's ``ok: false`` convention and their failures are
returned as data. Step 2 is a plain HTTP upload: a non-2xx status raises
UploadTransferError and step 3 is never attempted.

Known limitation: when step 2 fails, the file_id reserved in step 1 is left
behind on Slack's side. No compensating delete is issued.
"""
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Any, Optional

from .client import Credential, SlackClient, SlackResponse
from .errors import InvalidArgument, MissingArgument, SlackTransportError, UploadTransferError

logger = logging.getLogger("slack-mcp.upload")

DEFAULT_TEXT_TYPE = "text/plain"
DEFAULT_BINARY_TYPE = "application/octet-stream"


@dataclass
class UploadSession:
    """State for one upload call. Never shared between invocations."""

    filename: str
    content: bytes
    content_type: str
    upload_url: Optional[str] = None
    file_id: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.content)


def detect_content_type(filetype: Optional[str], name: Optional[str], default: str) -> str:
    """Explicit MIME type wins; otherwise guess from the file name."""
    if filetype and "/" in filetype:
        return filetype
    if name:
        guessed, _ = mimetypes.guess_type(name)
        if guessed:
            return guessed
    return default


def resolve_upload_source(
    content: Optional[str] = None,
    filename: Optional[str] = None,
    file_path: Optional[str] = None,
    filetype: Optional[str] = None,
) -> UploadSession:
    """Turn upload arguments into an UploadSession before any network call.

    Inline content needs a filename; a file_path supplies both (the base name
    is used unless filename overrides it).

    Raises:
        MissingArgument: neither content + filename nor file_path given.
        InvalidArgument: file_path does not point to a readable file.
    """
    if file_path:
        if not os.path.isfile(file_path):
            raise InvalidArgument(f"File not found: {file_path}")
        try:
            with open(file_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise InvalidArgument(f"Cannot read {file_path}: {e}") from e
        name = filename or os.path.basename(file_path)
        return UploadSession(
            filename=name,
            content=data,
            content_type=detect_content_type(filetype, file_path, DEFAULT_BINARY_TYPE),
        )

    missing = [field for field, value in (("content", content), ("filename", filename)) if not value]
    if missing:
        raise MissingArgument(missing, hint="or provide file_path")

    return UploadSession(
        filename=filename,
        content=content.encode("utf-8"),
        content_type=detect_content_type(filetype, filename, DEFAULT_TEXT_TYPE),
    )


async def get_upload_url_external(
    slack: SlackClient,
    filename: str,
    length: int,
    alt_text: Optional[str] = None,
) -> SlackResponse:
    """Step 1: reserve an upload URL and file ID."""
    body: dict[str, Any] = {"filename": filename, "length": length}
    if alt_text is not None:
        body["alt_text"] = alt_text
    return await slack.post("files.getUploadURLExternal", json=body, credential=Credential.USER)


async def complete_upload_external(
    slack: SlackClient,
    files: list[dict[str, Any]],
    channel_id: Optional[str] = None,
    initial_comment: Optional[str] = None,
    thread_ts: Optional[str] = None,
) -> SlackResponse:
    """Step 3: finalize one or more reserved uploads, optionally sharing them."""
    body: dict[str, Any] = {"files": files}
    for key, value in (("channel_id", channel_id), ("initial_comment", initial_comment), ("thread_ts", thread_ts)):
        if value is not None:
            body[key] = value
    return await slack.post("files.completeUploadExternal", json=body, credential=Credential.USER)


async def transfer_bytes(slack: SlackClient, session: UploadSession) -> None:
    """Step 2: POST the raw bytes to the one-time upload URL.

    Goes straight through the underlying httpx client, not SlackClient.request,
    so the bearer token is never sent to the upload host.

    Raises:
        UploadTransferError: the upload host answered with a non-2xx status.
        httpx.HTTPError: the transfer failed at the network level.
    """
    logger.info(f"Transferring {session.length} bytes for {session.file_id} ({session.content_type})")
    response = await slack.http.post(
        session.upload_url,
        content=session.content,
        headers={"Content-Type": session.content_type},
    )
    if not response.is_success:
        logger.error(
            f"Upload transfer failed for {session.file_id}: HTTP {response.status_code} "
            f"{response.reason_phrase}; reserved file ID is orphaned"
        )
        raise UploadTransferError(
            status_code=response.status_code,
            reason=response.reason_phrase,
            url=session.upload_url,
            file_id=session.file_id,
        )


async def upload_file_v2(
    slack: SlackClient,
    session: UploadSession,
    title: Optional[str] = None,
    alt_text: Optional[str] = None,
    channel_id: Optional[str] = None,
    initial_comment: Optional[str] = None,
    thread_ts: Optional[str] = None,
) -> SlackResponse:
    """Run reserve → transfer → finalize for one resolved UploadSession.

    Returns the step 1 response verbatim if it reports ``ok: false``,
    otherwise the step 3 response verbatim.
    """
    logger.info(f"Starting external upload of {session.filename} ({session.length} bytes)")

    reserved = await get_upload_url_external(slack, session.filename, session.length, alt_text)
    if not reserved.ok:
        logger.warning(f"Upload URL request for {session.filename} rejected: {reserved.error}")
        return reserved

    session.upload_url = reserved.get("upload_url")
    session.file_id = reserved.get("file_id")
    if not session.upload_url or not session.file_id:
        raise SlackTransportError("files.getUploadURLExternal response is missing upload_url or file_id")

    await transfer_bytes(slack, session)

    completed = await complete_upload_external(
        slack,
        files=[{"id": session.file_id, "title": title or session.filename}],
        channel_id=channel_id,
        initial_comment=initial_comment,
        thread_ts=thread_ts,
    )
    if completed.ok:
        logger.info(f"Completed external upload {session.file_id} ({session.filename})")
    return completed
