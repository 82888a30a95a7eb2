"""Slack MCP tool definitions.

This module is the definitive catalog of tools exposed over MCP. It is built
once at import time and never mutated; get_tools() always returns the same
descriptors in the same order.
"""

from mcp.types import Tool

_CHANNEL_ID = {"type": "string", "description": "Channel ID (e.g. C0123456789)"}

_THREAD_TS = {
    "type": "string",
    "description": "The timestamp of the parent message in the format '1234567890.123456'. "
                   "Timestamps in the format without the period can be converted by adding the "
                   "period such that 6 numbers come after it.",
}

_DOCUMENT_CONTENT = {
    "type": "object",
    "description": "Canvas content",
    "properties": {
        "type": {
            "type": "string",
            "enum": ["markdown"],
            "description": "Content type (currently only markdown is supported)",
        },
        "markdown": {
            "type": "string",
            "description": "Markdown content for the canvas",
        },
    },
    "required": ["type", "markdown"],
}

_PLAIN_TEXT = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "enum": ["plain_text"]},
        "text": {"type": "string"},
    },
    "required": ["type", "text"],
}

_MODAL_VIEW = {
    "type": "object",
    "description": "Modal view definition (Block Kit)",
    "properties": {
        "type": {"type": "string", "enum": ["modal"]},
        "title": _PLAIN_TEXT,
        "blocks": {"type": "array", "description": "Block Kit blocks"},
        "submit": _PLAIN_TEXT,
        "close": _PLAIN_TEXT,
        "callback_id": {"type": "string"},
    },
    "required": ["type", "title", "blocks"],
}

_SEARCH_OPTIONS = {
    "sort": {
        "type": "string",
        "enum": ["score", "timestamp"],
        "description": "Sort order for results",
        "default": "score",
    },
    "sort_dir": {
        "type": "string",
        "enum": ["asc", "desc"],
        "description": "Sort direction",
        "default": "desc",
    },
    "highlight": {
        "type": "boolean",
        "description": "Include highlight markers in results",
        "default": True,
    },
    "count": {
        "type": "integer",
        "description": "Number of items to return per page",
        "default": 20,
    },
    "page": {
        "type": "integer",
        "description": "Page number of results to return",
        "default": 1,
    },
}


_TOOLS: tuple[Tool, ...] = (
    # ============================================================================
    # Messaging & User Tools
    # ============================================================================
    Tool(
        name="slack_list_channels",
        description="List public and private channels in the workspace with pagination. "
                    "Archived channels are excluded.",
        inputSchema={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of channels to return (default 100, max 200)",
                    "default": 100,
                },
                "cursor": {
                    "type": "string",
                    "description": "Pagination cursor for next page of results",
                },
            },
        },
    ),
    Tool(
        name="slack_post_message",
        description="Post a new message to a Slack channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "The ID of the channel to post to"},
                "text": {"type": "string", "description": "The message text to post"},
            },
            "required": ["channel_id", "text"],
        },
    ),
    Tool(
        name="slack_reply_to_thread",
        description="Reply to a specific message thread in Slack",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "The ID of the channel containing the thread"},
                "thread_ts": _THREAD_TS,
                "text": {"type": "string", "description": "The reply text"},
            },
            "required": ["channel_id", "thread_ts", "text"],
        },
    ),
    Tool(
        name="slack_add_reaction",
        description="Add a reaction emoji to a message",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "The ID of the channel containing the message"},
                "timestamp": {"type": "string", "description": "The timestamp of the message to react to"},
                "reaction": {"type": "string", "description": "The name of the emoji reaction (without ::)"},
            },
            "required": ["channel_id", "timestamp", "reaction"],
        },
    ),
    Tool(
        name="slack_get_channel_history",
        description="Get recent messages from a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "The ID of the channel"},
                "limit": {
                    "type": "integer",
                    "description": "Number of messages to retrieve (default 10)",
                    "default": 10,
                },
            },
            "required": ["channel_id"],
        },
    ),
    Tool(
        name="slack_get_thread_replies",
        description="Get all replies in a message thread",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "The ID of the channel containing the thread"},
                "thread_ts": _THREAD_TS,
            },
            "required": ["channel_id", "thread_ts"],
        },
    ),
    Tool(
        name="slack_get_users",
        description="Get a list of all users in the workspace with their basic profile information",
        inputSchema={
            "type": "object",
            "properties": {
                "cursor": {"type": "string", "description": "Pagination cursor for next page of results"},
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of users to return (default 100, max 200)",
                    "default": 100,
                },
            },
        },
    ),
    Tool(
        name="slack_get_user_profile",
        description="Get detailed profile information for a specific user",
        inputSchema={
            "type": "object",
            "properties": {
                "user_id": {"type": "string", "description": "The ID of the user"},
            },
            "required": ["user_id"],
        },
    ),
    # ============================================================================
    # Canvas Tools
    # ============================================================================
    Tool(
        name="slack_canvas_create",
        description="Create a new standalone canvas",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Canvas title (optional)"},
                "document_content": _DOCUMENT_CONTENT,
                "channel_id": {
                    "type": "string",
                    "description": "Channel ID to tab the canvas in (required for free teams)",
                },
            },
        },
    ),
    Tool(
        name="slack_canvas_edit",
        description="Edit an existing canvas with specified changes",
        inputSchema={
            "type": "object",
            "properties": {
                "canvas_id": {"type": "string", "description": "Canvas ID to edit"},
                "changes": {
                    "type": "array",
                    "description": "Array of changes to apply to the canvas",
                    "items": {
                        "type": "object",
                        "properties": {
                            "operation": {
                                "type": "string",
                                "enum": [
                                    "insert_after", "insert_before", "replace",
                                    "delete", "insert_at_start", "insert_at_end",
                                ],
                                "description": "The operation to perform",
                            },
                            "section_id": {
                                "type": "string",
                                "description": "Section ID for relative operations "
                                               "(required for insert_after, insert_before, replace, delete)",
                            },
                            "document_content": _DOCUMENT_CONTENT,
                        },
                        "required": ["operation"],
                    },
                },
            },
            "required": ["canvas_id", "changes"],
        },
    ),
    Tool(
        name="slack_channel_canvas_create",
        description="Create a canvas for a specific channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "Channel ID to create the canvas for"},
                "document_content": _DOCUMENT_CONTENT,
            },
            "required": ["channel_id"],
        },
    ),
    Tool(
        name="slack_canvas_get",
        description="Get the sections of a specific canvas",
        inputSchema={
            "type": "object",
            "properties": {
                "canvas_id": {"type": "string", "description": "Canvas ID to retrieve"},
            },
            "required": ["canvas_id"],
        },
    ),
    Tool(
        name="slack_canvas_delete",
        description="Delete a canvas (cannot be undone). Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "canvas_id": {"type": "string", "description": "Canvas ID to delete"},
            },
            "required": ["canvas_id"],
        },
    ),
    Tool(
        name="slack_canvas_access_set",
        description="Set access permissions for a canvas. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "canvas_id": {"type": "string", "description": "Canvas ID to modify access for"},
                "access_level": {
                    "type": "string",
                    "enum": ["read", "write", "none"],
                    "description": "Access level to grant",
                },
                "channel_ids": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of channel IDs to grant access to (cannot be used with user_ids)",
                },
                "user_ids": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of user IDs to grant access to (cannot be used with channel_ids)",
                },
            },
            "required": ["canvas_id", "access_level"],
        },
    ),
    # ============================================================================
    # File Tools
    # ============================================================================
    Tool(
        name="slack_files_upload",
        description="Upload a file to Slack in a single request (legacy files.upload). "
                    "Prefer slack_files_upload_v2. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "File content (for text files)"},
                "filename": {"type": "string", "description": "Name of the file"},
                "filetype": {"type": "string", "description": "Type of file (e.g., 'text', 'javascript', 'python')"},
                "title": {"type": "string", "description": "Title of the file"},
                "initial_comment": {"type": "string", "description": "Initial comment to add about the file"},
                "channels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Channel IDs where the file will be shared",
                },
                "thread_ts": {"type": "string", "description": "Thread timestamp to upload file to"},
            },
            "required": ["content", "filename"],
        },
    ),
    Tool(
        name="slack_files_list",
        description="List files in the workspace",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": {"type": "string", "description": "Filter files by channel"},
                "user": {"type": "string", "description": "Filter files by user who uploaded"},
                "types": {"type": "string", "description": "Filter files by type (e.g., 'images,pdfs')"},
                "from": {"type": "number", "description": "Filter files created after this Unix timestamp"},
                "to": {"type": "number", "description": "Filter files created before this Unix timestamp"},
                "count": {
                    "type": "integer",
                    "description": "Number of items to return per page (default: 100)",
                    "default": 100,
                },
                "page": {
                    "type": "integer",
                    "description": "Page number of results to return",
                    "default": 1,
                },
            },
        },
    ),
    Tool(
        name="slack_files_info",
        description="Get information about a file",
        inputSchema={
            "type": "object",
            "properties": {
                "file": {"type": "string", "description": "File ID"},
                "page": {"type": "integer", "description": "Page number of comments to return"},
                "count": {"type": "integer", "description": "Number of comments per page"},
            },
            "required": ["file"],
        },
    ),
    Tool(
        name="slack_files_delete",
        description="Delete a file. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "file": {"type": "string", "description": "File ID to delete"},
            },
            "required": ["file"],
        },
    ),
    Tool(
        name="slack_files_getUploadURLExternal",
        description="Get an upload URL for uploading a file to Slack (step 1 of the v2 upload flow). "
                    "Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "filename": {"type": "string", "description": "Name of the file to upload"},
                "length": {"type": "integer", "description": "Size of the file in bytes"},
                "alt_txt": {"type": "string", "description": "Alternative text for the file"},
            },
            "required": ["filename", "length"],
        },
    ),
    Tool(
        name="slack_files_completeUploadExternal",
        description="Complete the file upload process (final step of the v2 upload flow). "
                    "Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "files": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string", "description": "File ID from getUploadURLExternal"},
                            "title": {"type": "string", "description": "Title of the file"},
                        },
                        "required": ["id"],
                    },
                    "description": "Array of file objects to complete upload for",
                },
                "channel_id": {"type": "string", "description": "Channel ID to share the file to"},
                "initial_comment": {"type": "string", "description": "Initial comment about the file"},
                "thread_ts": {"type": "string", "description": "Thread timestamp to share into"},
            },
            "required": ["files"],
        },
    ),
    Tool(
        name="slack_files_upload_v2",
        description="Upload a file to Slack using the v2 external upload flow (recommended). "
                    "Provide either content + filename, or file_path to upload a local file. "
                    "Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "File content (for text files)"},
                "filename": {
                    "type": "string",
                    "description": "Name of the file (defaults to the base name of file_path)",
                },
                "file_path": {"type": "string", "description": "Path of a local file to upload"},
                "filetype": {
                    "type": "string",
                    "description": "MIME type of the file (auto-detected from the file name if omitted)",
                },
                "title": {"type": "string", "description": "Title of the file (defaults to filename)"},
                "alt_text": {"type": "string", "description": "Alternative text for images"},
                "initial_comment": {"type": "string", "description": "Initial comment to add about the file"},
                "channel_id": {"type": "string", "description": "Channel ID where the file will be shared"},
                "channels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Channel IDs; the first is used when channel_id is not given",
                },
                "thread_ts": {"type": "string", "description": "Thread timestamp to upload file to"},
            },
        },
    ),
    # ============================================================================
    # Search Tools (user token)
    # ============================================================================
    Tool(
        name="slack_search_messages",
        description="Search for messages in the workspace. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query (supports operators like from:user, in:channel)",
                },
                **_SEARCH_OPTIONS,
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="slack_search_files",
        description="Search for files in the workspace. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query for files"},
                **_SEARCH_OPTIONS,
            },
            "required": ["query"],
        },
    ),
    # ============================================================================
    # Reminder Tools (user token)
    # ============================================================================
    Tool(
        name="slack_reminders_add",
        description="Create a reminder. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "The content of the reminder"},
                "time": {
                    "type": ["string", "number"],
                    "description": "When to send the reminder (Unix timestamp or natural language "
                                   "like 'tomorrow at 3pm')",
                },
                "user": {
                    "type": "string",
                    "description": "User ID to send the reminder to (defaults to the user who created it)",
                },
            },
            "required": ["text", "time"],
        },
    ),
    Tool(
        name="slack_reminders_list",
        description="List all reminders. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "user": {"type": "string", "description": "Filter reminders by user"},
            },
        },
    ),
    Tool(
        name="slack_reminders_delete",
        description="Delete a reminder. Requires SLACK_USER_TOKEN.",
        inputSchema={
            "type": "object",
            "properties": {
                "reminder": {"type": "string", "description": "The ID of the reminder to delete"},
            },
            "required": ["reminder"],
        },
    ),
    # ============================================================================
    # Conversation Management Tools
    # ============================================================================
    Tool(
        name="slack_conversation_create",
        description="Create a new channel",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the channel to create (max 21 characters, lowercase)",
                },
                "is_private": {
                    "type": "boolean",
                    "description": "Create as a private channel",
                    "default": False,
                },
                "team_id": {"type": "string", "description": "Team ID for Enterprise Grid"},
            },
            "required": ["name"],
        },
    ),
    Tool(
        name="slack_conversation_archive",
        description="Archive a channel",
        inputSchema={
            "type": "object",
            "properties": {"channel": {"type": "string", "description": "Channel ID to archive"}},
            "required": ["channel"],
        },
    ),
    Tool(
        name="slack_conversation_unarchive",
        description="Unarchive a channel",
        inputSchema={
            "type": "object",
            "properties": {"channel": {"type": "string", "description": "Channel ID to unarchive"}},
            "required": ["channel"],
        },
    ),
    Tool(
        name="slack_conversation_invite",
        description="Invite users to a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "users": {"type": "string", "description": "Comma-separated list of user IDs to invite"},
            },
            "required": ["channel", "users"],
        },
    ),
    Tool(
        name="slack_conversation_kick",
        description="Remove a user from a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "user": {"type": "string", "description": "User ID to remove"},
            },
            "required": ["channel", "user"],
        },
    ),
    Tool(
        name="slack_conversation_rename",
        description="Rename a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "name": {"type": "string", "description": "New name for the channel"},
            },
            "required": ["channel", "name"],
        },
    ),
    Tool(
        name="slack_conversation_set_purpose",
        description="Set the purpose of a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "purpose": {"type": "string", "description": "New channel purpose"},
            },
            "required": ["channel", "purpose"],
        },
    ),
    Tool(
        name="slack_conversation_set_topic",
        description="Set the topic of a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "topic": {"type": "string", "description": "New channel topic"},
            },
            "required": ["channel", "topic"],
        },
    ),
    Tool(
        name="slack_conversation_join",
        description="Join a channel",
        inputSchema={
            "type": "object",
            "properties": {"channel": {"type": "string", "description": "Channel ID to join"}},
            "required": ["channel"],
        },
    ),
    Tool(
        name="slack_conversation_leave",
        description="Leave a channel",
        inputSchema={
            "type": "object",
            "properties": {"channel": {"type": "string", "description": "Channel ID to leave"}},
            "required": ["channel"],
        },
    ),
    # ============================================================================
    # Pin Tools
    # ============================================================================
    Tool(
        name="slack_pins_add",
        description="Pin a message to a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "timestamp": {"type": "string", "description": "Timestamp of the message to pin"},
            },
            "required": ["channel", "timestamp"],
        },
    ),
    Tool(
        name="slack_pins_remove",
        description="Remove a pinned message from a channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": _CHANNEL_ID,
                "timestamp": {"type": "string", "description": "Timestamp of the message to unpin"},
            },
            "required": ["channel", "timestamp"],
        },
    ),
    Tool(
        name="slack_pins_list",
        description="List all pinned items in a channel",
        inputSchema={
            "type": "object",
            "properties": {"channel": _CHANNEL_ID},
            "required": ["channel"],
        },
    ),
    # ============================================================================
    # Reaction Tools
    # ============================================================================
    Tool(
        name="slack_reactions_remove",
        description="Remove a reaction from a message",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": {"type": "string", "description": "Channel ID containing the message"},
                "timestamp": {"type": "string", "description": "Timestamp of the message"},
                "name": {"type": "string", "description": "Reaction name to remove (without colons)"},
            },
            "required": ["channel", "timestamp", "name"],
        },
    ),
    Tool(
        name="slack_reactions_get",
        description="Get reactions for a message",
        inputSchema={
            "type": "object",
            "properties": {
                "channel": {"type": "string", "description": "Channel ID containing the message"},
                "timestamp": {"type": "string", "description": "Timestamp of the message"},
                "full": {
                    "type": "boolean",
                    "description": "Return all reactions (not just first 25)",
                    "default": False,
                },
            },
            "required": ["channel", "timestamp"],
        },
    ),
    Tool(
        name="slack_reactions_list",
        description="List all items reacted to by the user",
        inputSchema={
            "type": "object",
            "properties": {
                "count": {"type": "integer", "description": "Number of items per page", "default": 100},
                "page": {"type": "integer", "description": "Page number", "default": 1},
                "full": {
                    "type": "boolean",
                    "description": "Return all reactions for each item",
                    "default": False,
                },
            },
        },
    ),
    # ============================================================================
    # View (Modal) Tools
    # ============================================================================
    Tool(
        name="slack_views_open",
        description="Open a modal dialog",
        inputSchema={
            "type": "object",
            "properties": {
                "trigger_id": {"type": "string", "description": "Trigger ID from user interaction"},
                "view": _MODAL_VIEW,
            },
            "required": ["trigger_id", "view"],
        },
    ),
    Tool(
        name="slack_views_update",
        description="Update an existing modal",
        inputSchema={
            "type": "object",
            "properties": {
                "view_id": {"type": "string", "description": "ID of the view to update"},
                "view": _MODAL_VIEW,
                "hash": {"type": "string", "description": "Hash for conflict detection"},
            },
            "required": ["view_id", "view"],
        },
    ),
    Tool(
        name="slack_views_push",
        description="Push a new view onto the modal stack",
        inputSchema={
            "type": "object",
            "properties": {
                "trigger_id": {"type": "string", "description": "Trigger ID from user interaction"},
                "view": _MODAL_VIEW,
            },
            "required": ["trigger_id", "view"],
        },
    ),
)


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools for the Slack workspace."""
    return list(_TOOLS)


def get_tool(name: str):
    """Look up one tool descriptor by name, or None."""
    return _TOOLS_BY_NAME.get(name)


_TOOLS_BY_NAME: dict[str, Tool] = {tool.name: tool for tool in _TOOLS}
