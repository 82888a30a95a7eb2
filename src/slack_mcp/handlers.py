"""Slack MCP tool handlers.

Every handler follows the same pattern:
- Registered by tool name with @register, together with its argument model
  and the credential it needs
- Accepts: a validated argument model and the SlackClient
- Returns: the SlackResponse from the gateway, passed back verbatim

Argument validation and error handling live in the dispatcher; handlers only
map arguments onto Slack Web API calls.
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Type
import logging

from . import schemas
from .client import Credential, SlackClient, SlackResponse
from .upload import complete_upload_external, get_upload_url_external, resolve_upload_source, upload_file_v2

logger = logging.getLogger("slack-mcp.handlers")

MAX_PAGE_LIMIT = 200

HandlerFunc = Callable[..., Awaitable[SlackResponse]]


@dataclass(frozen=True)
class ToolHandler:
    """A registered tool: its argument model, implementation and credential."""

    name: str
    arguments: Type[schemas.ToolArguments]
    func: HandlerFunc
    credential: Credential = Credential.BOT

    async def __call__(self, args: schemas.ToolArguments, slack: SlackClient) -> SlackResponse:
        return await self.func(args, slack)


HANDLERS: dict[str, ToolHandler] = {}


def register(name: str, arguments: Type[schemas.ToolArguments], credential: Credential = Credential.BOT):
    """Register a handler for a tool name."""
    def decorator(func: HandlerFunc) -> HandlerFunc:
        if name in HANDLERS:
            raise ValueError(f"Duplicate handler registration for {name}")
        HANDLERS[name] = ToolHandler(name=name, arguments=arguments, func=func, credential=credential)
        return func
    return decorator


def get_handler(name: str):
    return HANDLERS.get(name)


# ============================================================================
# Messaging & User Handlers
# ============================================================================

@register("slack_list_channels", schemas.ListChannelsArgs)
async def handle_list_channels(args: schemas.ListChannelsArgs, slack: SlackClient) -> SlackResponse:
    """List public and private, non-archived channels of the configured team."""
    params = {
        "types": "public_channel,private_channel",
        "exclude_archived": True,
        "limit": min(args.limit, MAX_PAGE_LIMIT),
        "team_id": slack.team_id,
        "cursor": args.cursor,
    }
    return await slack.get("conversations.list", params=params)


@register("slack_post_message", schemas.PostMessageArgs)
async def handle_post_message(args: schemas.PostMessageArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("chat.postMessage", json={"channel": args.channel_id, "text": args.text})


@register("slack_reply_to_thread", schemas.ReplyToThreadArgs)
async def handle_reply_to_thread(args: schemas.ReplyToThreadArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post(
        "chat.postMessage",
        json={"channel": args.channel_id, "thread_ts": args.thread_ts, "text": args.text},
    )


@register("slack_add_reaction", schemas.AddReactionArgs)
async def handle_add_reaction(args: schemas.AddReactionArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post(
        "reactions.add",
        json={"channel": args.channel_id, "timestamp": args.timestamp, "name": args.reaction},
    )


@register("slack_get_channel_history", schemas.GetChannelHistoryArgs)
async def handle_get_channel_history(args: schemas.GetChannelHistoryArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("conversations.history", params={"channel": args.channel_id, "limit": args.limit})


@register("slack_get_thread_replies", schemas.GetThreadRepliesArgs)
async def handle_get_thread_replies(args: schemas.GetThreadRepliesArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("conversations.replies", params={"channel": args.channel_id, "ts": args.thread_ts})


@register("slack_get_users", schemas.GetUsersArgs)
async def handle_get_users(args: schemas.GetUsersArgs, slack: SlackClient) -> SlackResponse:
    params = {
        "limit": min(args.limit, MAX_PAGE_LIMIT),
        "team_id": slack.team_id,
        "cursor": args.cursor,
    }
    return await slack.get("users.list", params=params)


@register("slack_get_user_profile", schemas.GetUserProfileArgs)
async def handle_get_user_profile(args: schemas.GetUserProfileArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("users.profile.get", params={"user": args.user_id, "include_labels": True})


# ============================================================================
# Canvas Handlers
# ============================================================================

@register("slack_canvas_create", schemas.CanvasCreateArgs)
async def handle_canvas_create(args: schemas.CanvasCreateArgs, slack: SlackClient) -> SlackResponse:
    """Create a standalone canvas. Only the fields provided are sent."""
    return await slack.post("canvases.create", json=args.payload())


@register("slack_canvas_edit", schemas.CanvasEditArgs)
async def handle_canvas_edit(args: schemas.CanvasEditArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("canvases.edit", json=args.payload())


@register("slack_channel_canvas_create", schemas.ChannelCanvasCreateArgs)
async def handle_channel_canvas_create(args: schemas.ChannelCanvasCreateArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.canvases.create", json=args.payload())


@register("slack_canvas_get", schemas.CanvasIdArgs)
async def handle_canvas_get(args: schemas.CanvasIdArgs, slack: SlackClient) -> SlackResponse:
    """Look up the sections of a canvas (canvases.sections.lookup)."""
    return await slack.get("canvases.sections.lookup", params={"canvas_id": args.canvas_id})


@register("slack_canvas_delete", schemas.CanvasIdArgs, credential=Credential.USER)
async def handle_canvas_delete(args: schemas.CanvasIdArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("canvases.delete", json={"canvas_id": args.canvas_id}, credential=Credential.USER)


@register("slack_canvas_access_set", schemas.CanvasAccessSetArgs, credential=Credential.USER)
async def handle_canvas_access_set(args: schemas.CanvasAccessSetArgs, slack: SlackClient) -> SlackResponse:
    """Grant read/write/none on a canvas to channels or users (never both)."""
    return await slack.post("canvases.access.set", json=args.payload(), credential=Credential.USER)


# ============================================================================
# File Handlers
# ============================================================================

@register("slack_files_upload", schemas.FilesUploadArgs, credential=Credential.USER)
async def handle_files_upload(args: schemas.FilesUploadArgs, slack: SlackClient) -> SlackResponse:
    """Legacy single-request upload. files.upload only accepts multipart/form-data."""
    fields = {
        "content": args.content,
        "filename": args.filename,
        "filetype": args.filetype,
        "title": args.title,
        "initial_comment": args.initial_comment,
        "channels": ",".join(args.channels) if args.channels else None,
        "thread_ts": args.thread_ts,
    }
    form = {key: (None, value) for key, value in fields.items() if value}
    return await slack.post("files.upload", files=form, credential=Credential.USER)


@register("slack_files_list", schemas.FilesListArgs)
async def handle_files_list(args: schemas.FilesListArgs, slack: SlackClient) -> SlackResponse:
    params = {
        "channel": args.channel,
        "user": args.user,
        "types": args.types,
        "ts_from": args.ts_from,
        "ts_to": args.ts_to,
        "count": args.count,
        "page": args.page,
    }
    return await slack.get("files.list", params=params)


@register("slack_files_info", schemas.FilesInfoArgs)
async def handle_files_info(args: schemas.FilesInfoArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("files.info", params={"file": args.file, "page": args.page, "count": args.count})


@register("slack_files_delete", schemas.FilesDeleteArgs, credential=Credential.USER)
async def handle_files_delete(args: schemas.FilesDeleteArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("files.delete", json={"file": args.file}, credential=Credential.USER)


@register("slack_files_getUploadURLExternal", schemas.GetUploadURLExternalArgs, credential=Credential.USER)
async def handle_files_get_upload_url_external(
    args: schemas.GetUploadURLExternalArgs, slack: SlackClient
) -> SlackResponse:
    return await get_upload_url_external(slack, args.filename, args.length, args.alt_txt)


@register("slack_files_completeUploadExternal", schemas.CompleteUploadExternalArgs, credential=Credential.USER)
async def handle_files_complete_upload_external(
    args: schemas.CompleteUploadExternalArgs, slack: SlackClient
) -> SlackResponse:
    return await complete_upload_external(
        slack,
        files=[f.model_dump(exclude_none=True) for f in args.files],
        channel_id=args.channel_id,
        initial_comment=args.initial_comment,
        thread_ts=args.thread_ts,
    )


@register("slack_files_upload_v2", schemas.FilesUploadV2Args, credential=Credential.USER)
async def handle_files_upload_v2(args: schemas.FilesUploadV2Args, slack: SlackClient) -> SlackResponse:
    """Upload via the external upload flow (reserve, transfer, finalize).

    Input is resolved before any network call; see upload.resolve_upload_source.
    """
    session = resolve_upload_source(
        content=args.content,
        filename=args.filename,
        file_path=args.file_path,
        filetype=args.filetype,
    )
    channel_id = args.channel_id or (args.channels[0] if args.channels else None)
    return await upload_file_v2(
        slack,
        session,
        title=args.title,
        alt_text=args.alt_text,
        channel_id=channel_id,
        initial_comment=args.initial_comment,
        thread_ts=args.thread_ts,
    )


# ============================================================================
# Search Handlers
# ============================================================================

def _search_params(args: schemas.SearchArgs) -> dict:
    return {
        "query": args.query,
        "sort": args.sort,
        "sort_dir": args.sort_dir,
        "highlight": args.highlight,
        "count": args.count,
        "page": args.page,
    }


@register("slack_search_messages", schemas.SearchArgs, credential=Credential.USER)
async def handle_search_messages(args: schemas.SearchArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("search.messages", params=_search_params(args), credential=Credential.USER)


@register("slack_search_files", schemas.SearchArgs, credential=Credential.USER)
async def handle_search_files(args: schemas.SearchArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("search.files", params=_search_params(args), credential=Credential.USER)


# ============================================================================
# Reminder Handlers
# ============================================================================

@register("slack_reminders_add", schemas.RemindersAddArgs, credential=Credential.USER)
async def handle_reminders_add(args: schemas.RemindersAddArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("reminders.add", json=args.payload(), credential=Credential.USER)


@register("slack_reminders_list", schemas.RemindersListArgs, credential=Credential.USER)
async def handle_reminders_list(args: schemas.RemindersListArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("reminders.list", params={"user": args.user}, credential=Credential.USER)


@register("slack_reminders_delete", schemas.RemindersDeleteArgs, credential=Credential.USER)
async def handle_reminders_delete(args: schemas.RemindersDeleteArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("reminders.delete", json={"reminder": args.reminder}, credential=Credential.USER)


# ============================================================================
# Conversation Management Handlers
# ============================================================================

@register("slack_conversation_create", schemas.ConversationCreateArgs)
async def handle_conversation_create(args: schemas.ConversationCreateArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.create", json=args.payload())


@register("slack_conversation_archive", schemas.ChannelArgs)
async def handle_conversation_archive(args: schemas.ChannelArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.archive", json={"channel": args.channel})


@register("slack_conversation_unarchive", schemas.ChannelArgs)
async def handle_conversation_unarchive(args: schemas.ChannelArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.unarchive", json={"channel": args.channel})


@register("slack_conversation_invite", schemas.ConversationInviteArgs)
async def handle_conversation_invite(args: schemas.ConversationInviteArgs, slack: SlackClient) -> SlackResponse:
    """Invite users; ``users`` is a comma-separated list of user IDs."""
    return await slack.post("conversations.invite", json={"channel": args.channel, "users": args.users})


@register("slack_conversation_kick", schemas.ConversationKickArgs)
async def handle_conversation_kick(args: schemas.ConversationKickArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.kick", json={"channel": args.channel, "user": args.user})


@register("slack_conversation_rename", schemas.ConversationRenameArgs)
async def handle_conversation_rename(args: schemas.ConversationRenameArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.rename", json={"channel": args.channel, "name": args.name})


@register("slack_conversation_set_purpose", schemas.ConversationSetPurposeArgs)
async def handle_conversation_set_purpose(
    args: schemas.ConversationSetPurposeArgs, slack: SlackClient
) -> SlackResponse:
    return await slack.post("conversations.setPurpose", json={"channel": args.channel, "purpose": args.purpose})


@register("slack_conversation_set_topic", schemas.ConversationSetTopicArgs)
async def handle_conversation_set_topic(args: schemas.ConversationSetTopicArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.setTopic", json={"channel": args.channel, "topic": args.topic})


@register("slack_conversation_join", schemas.ChannelArgs)
async def handle_conversation_join(args: schemas.ChannelArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.join", json={"channel": args.channel})


@register("slack_conversation_leave", schemas.ChannelArgs)
async def handle_conversation_leave(args: schemas.ChannelArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("conversations.leave", json={"channel": args.channel})


# ============================================================================
# Pin Handlers
# ============================================================================

@register("slack_pins_add", schemas.MessageRefArgs)
async def handle_pins_add(args: schemas.MessageRefArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("pins.add", json={"channel": args.channel, "timestamp": args.timestamp})


@register("slack_pins_remove", schemas.MessageRefArgs)
async def handle_pins_remove(args: schemas.MessageRefArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("pins.remove", json={"channel": args.channel, "timestamp": args.timestamp})


@register("slack_pins_list", schemas.ChannelArgs)
async def handle_pins_list(args: schemas.ChannelArgs, slack: SlackClient) -> SlackResponse:
    return await slack.get("pins.list", params={"channel": args.channel})


# ============================================================================
# Reaction Handlers
# ============================================================================

@register("slack_reactions_remove", schemas.ReactionsRemoveArgs)
async def handle_reactions_remove(args: schemas.ReactionsRemoveArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post(
        "reactions.remove",
        json={"channel": args.channel, "timestamp": args.timestamp, "name": args.name},
    )


@register("slack_reactions_get", schemas.ReactionsGetArgs)
async def handle_reactions_get(args: schemas.ReactionsGetArgs, slack: SlackClient) -> SlackResponse:
    params = {"channel": args.channel, "timestamp": args.timestamp, "full": True if args.full else None}
    return await slack.get("reactions.get", params=params)


@register("slack_reactions_list", schemas.ReactionsListArgs)
async def handle_reactions_list(args: schemas.ReactionsListArgs, slack: SlackClient) -> SlackResponse:
    params = {"count": args.count, "page": args.page, "full": True if args.full else None}
    return await slack.get("reactions.list", params=params)


# ============================================================================
# View (Modal) Handlers
# ============================================================================

@register("slack_views_open", schemas.ViewsOpenArgs)
async def handle_views_open(args: schemas.ViewsOpenArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("views.open", json=args.payload())


@register("slack_views_update", schemas.ViewsUpdateArgs)
async def handle_views_update(args: schemas.ViewsUpdateArgs, slack: SlackClient) -> SlackResponse:
    """Update a modal; ``hash`` guards against overwriting a newer version."""
    return await slack.post("views.update", json=args.payload())


@register("slack_views_push", schemas.ViewsOpenArgs)
async def handle_views_push(args: schemas.ViewsOpenArgs, slack: SlackClient) -> SlackResponse:
    return await slack.post("views.push", json=args.payload())
