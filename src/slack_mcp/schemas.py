"""Pydantic argument models, one per tool (shared where the shapes are identical).

A model is validated before its handler runs, so handler bodies can rely on
required fields being present and correctly typed. validate_arguments()
converts pydantic's ValidationError into MissingArgument / InvalidArgument.
"""
from typing import Any, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidArgument, MissingArgument

ArgsT = TypeVar("ArgsT", bound=BaseModel)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


class ToolArguments(BaseModel):
    """Base for all tool argument models. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def payload(self, **overrides: Any) -> dict[str, Any]:
        """JSON body for Slack: set fields only, by alias, plus overrides."""
        body = self.model_dump(by_alias=True, exclude_none=True)
        body.update({k: v for k, v in overrides.items() if v is not None})
        return body


def validate_arguments(model: Type[ArgsT], arguments: dict[str, Any]) -> ArgsT:
    """Validate raw tool arguments against a model.

    Raises:
        MissingArgument: one or more required fields are absent, null or empty.
        InvalidArgument: any other schema violation.
    """
    missing = [
        field.alias or name
        for name, field in model.model_fields.items()
        if field.is_required() and _is_blank(arguments.get(field.alias or name))
    ]
    if missing:
        raise MissingArgument(missing)

    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        problems: list[str] = []
        for error in e.errors():
            message = error.get("msg", "invalid value")
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            where = ".".join(str(part) for part in error.get("loc") or ())
            problems.append(f"{where}: {message}" if where else message)
        raise InvalidArgument("Invalid arguments: " + "; ".join(problems)) from e


# ============================================================================
# Messaging & users
# ============================================================================

class ListChannelsArgs(ToolArguments):
    limit: int = Field(100, ge=1)
    cursor: Optional[str] = None


class PostMessageArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class ReplyToThreadArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    thread_ts: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class AddReactionArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    timestamp: str = Field(..., min_length=1)
    reaction: str = Field(..., min_length=1)


class GetChannelHistoryArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    limit: int = Field(10, ge=1)


class GetThreadRepliesArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    thread_ts: str = Field(..., min_length=1)


class GetUsersArgs(ToolArguments):
    cursor: Optional[str] = None
    limit: int = Field(100, ge=1)


class GetUserProfileArgs(ToolArguments):
    user_id: str = Field(..., min_length=1)


# ============================================================================
# Canvases
# ============================================================================

class DocumentContent(BaseModel):
    type: Literal["markdown"]
    markdown: str


class CanvasChange(BaseModel):
    operation: Literal["insert_after", "insert_before", "replace", "delete", "insert_at_start", "insert_at_end"]
    section_id: Optional[str] = None
    document_content: Optional[DocumentContent] = None


class CanvasCreateArgs(ToolArguments):
    title: Optional[str] = None
    document_content: Optional[DocumentContent] = None
    channel_id: Optional[str] = None


class CanvasEditArgs(ToolArguments):
    canvas_id: str = Field(..., min_length=1)
    changes: list[CanvasChange] = Field(..., min_length=1)


class ChannelCanvasCreateArgs(ToolArguments):
    channel_id: str = Field(..., min_length=1)
    document_content: Optional[DocumentContent] = None


class CanvasIdArgs(ToolArguments):
    """Shared by slack_canvas_get and slack_canvas_delete."""

    canvas_id: str = Field(..., min_length=1)


class CanvasAccessSetArgs(ToolArguments):
    canvas_id: str = Field(..., min_length=1)
    access_level: Literal["read", "write", "none"]
    channel_ids: Optional[list[str]] = None
    user_ids: Optional[list[str]] = None

    @model_validator(mode="after")
    def _one_target_kind(self):
        if self.channel_ids and self.user_ids:
            raise ValueError("Cannot specify both channel_ids and user_ids")
        return self


# ============================================================================
# Files
# ============================================================================

class FilesUploadArgs(ToolArguments):
    """Legacy single-request upload (files.upload)."""

    content: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1)
    filetype: Optional[str] = None
    title: Optional[str] = None
    initial_comment: Optional[str] = None
    channels: Optional[list[str]] = None
    thread_ts: Optional[str] = None


class FilesUploadV2Args(ToolArguments):
    """Two-phase upload. Either content + filename, or file_path."""

    content: Optional[str] = None
    filename: Optional[str] = None
    file_path: Optional[str] = None
    filetype: Optional[str] = None
    title: Optional[str] = None
    alt_text: Optional[str] = None
    initial_comment: Optional[str] = None
    channel_id: Optional[str] = None
    channels: Optional[list[str]] = None
    thread_ts: Optional[str] = None


class FilesListArgs(ToolArguments):
    channel: Optional[str] = None
    user: Optional[str] = None
    types: Optional[str] = None
    ts_from: Optional[Union[int, float]] = Field(None, alias="from")
    ts_to: Optional[Union[int, float]] = Field(None, alias="to")
    count: Optional[int] = Field(None, ge=1)
    page: Optional[int] = Field(None, ge=1)


class FilesInfoArgs(ToolArguments):
    file: str = Field(..., min_length=1)
    page: Optional[int] = Field(None, ge=1)
    count: Optional[int] = Field(None, ge=1)


class FilesDeleteArgs(ToolArguments):
    file: str = Field(..., min_length=1)


class GetUploadURLExternalArgs(ToolArguments):
    filename: str = Field(..., min_length=1)
    length: int = Field(..., ge=0)
    alt_txt: Optional[str] = None


class ExternalFileRef(BaseModel):
    id: str = Field(..., min_length=1)
    title: Optional[str] = None


class CompleteUploadExternalArgs(ToolArguments):
    files: list[ExternalFileRef] = Field(..., min_length=1)
    channel_id: Optional[str] = None
    initial_comment: Optional[str] = None
    thread_ts: Optional[str] = None


# ============================================================================
# Search
# ============================================================================

class SearchArgs(ToolArguments):
    """Shared by slack_search_messages and slack_search_files."""

    query: str = Field(..., min_length=1)
    sort: Optional[Literal["score", "timestamp"]] = None
    sort_dir: Optional[Literal["asc", "desc"]] = None
    highlight: Optional[bool] = None
    count: Optional[int] = Field(None, ge=1)
    page: Optional[int] = Field(None, ge=1)


# ============================================================================
# Reminders
# ============================================================================

class RemindersAddArgs(ToolArguments):
    text: str = Field(..., min_length=1)
    time: Union[int, float, str]
    user: Optional[str] = None


class RemindersListArgs(ToolArguments):
    user: Optional[str] = None


class RemindersDeleteArgs(ToolArguments):
    reminder: str = Field(..., min_length=1)


# ============================================================================
# Conversations
# ============================================================================

class ConversationCreateArgs(ToolArguments):
    name: str = Field(..., min_length=1)
    is_private: bool = False
    team_id: Optional[str] = None


class ChannelArgs(ToolArguments):
    """A single channel ID: archive, unarchive, join, leave, pins list."""

    channel: str = Field(..., min_length=1)


class ConversationInviteArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    users: str = Field(..., min_length=1)


class ConversationKickArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)


class ConversationRenameArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ConversationSetPurposeArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    purpose: str = Field(..., min_length=1)


class ConversationSetTopicArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)


# ============================================================================
# Pins & reactions
# ============================================================================

class MessageRefArgs(ToolArguments):
    """channel + timestamp: pins add/remove."""

    channel: str = Field(..., min_length=1)
    timestamp: str = Field(..., min_length=1)


class ReactionsRemoveArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    timestamp: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ReactionsGetArgs(ToolArguments):
    channel: str = Field(..., min_length=1)
    timestamp: str = Field(..., min_length=1)
    full: bool = False


class ReactionsListArgs(ToolArguments):
    count: Optional[int] = Field(None, ge=1)
    page: Optional[int] = Field(None, ge=1)
    full: bool = False


# ============================================================================
# Views
# ============================================================================

class PlainText(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Literal["plain_text"]
    text: str


class ModalView(BaseModel):
    """Block Kit modal. Extra keys (private_metadata etc.) pass through."""

    model_config = ConfigDict(extra="allow")

    type: Literal["modal"]
    title: PlainText
    blocks: list[Any]
    submit: Optional[PlainText] = None
    close: Optional[PlainText] = None
    callback_id: Optional[str] = None


class ViewsOpenArgs(ToolArguments):
    """Shared by slack_views_open and slack_views_push."""

    trigger_id: str = Field(..., min_length=1)
    view: ModalView


class ViewsUpdateArgs(ToolArguments):
    view_id: str = Field(..., min_length=1)
    view: ModalView
    hash: Optional[str] = None
