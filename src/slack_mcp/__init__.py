"""Slack MCP Server - Model Context Protocol integration for Slack.

This package exposes a Slack workspace (messaging, channels, users, canvases,
files, search, reminders, pins, reactions and modal views) as MCP tools that
an AI assistant can call over stdio.

Modules:
- server: stdio MCP server implementation
- config: Environment configuration
- client: Slack Web API client
- tools: MCP tool definitions
- schemas: Argument models per tool
- handlers: Tool implementation handlers
- upload: Two-phase external file upload
- dispatcher: Tool dispatch with per-call error isolation
- resilience: Process-level fault counting and shutdown
"""

__version__ = "1.0.0"

from . import tools
from . import handlers

__all__ = ["tools", "handlers", "__version__"]
