#!/usr/bin/env python3
"""
Moorcheh MCP Server - semantic search and AI answers over Moorcheh namespaces.

Exposes the Moorcheh API as MCP tools, resources and prompts over stdio.

Tools:
    list-namespaces, create-namespace, delete-namespace
    upload-text, upload-vectors, upload-file, delete-data, get-data
    search, answer

Resources:
    moorcheh://namespaces, moorcheh://namespace/{namespace_name}
    moorcheh://docs/api, moorcheh://config/help, moorcheh://guides/*

Prompts:
    search-optimization, data-organization, ai-answer-setup

Usage:
    # Run directly
    python -m moorcheh_mcp.server

    # Or via entry point after install
    moorcheh-mcp --log-level DEBUG --json-logs

Configuration:
    MOORCHEH_API_KEY: API key (required; environment or .env file)
    MOORCHEH_API_BASE_URL: API base URL (default: https://api.moorcheh.ai/v1)
    MOORCHEH_LOG_LEVEL / MOORCHEH_LOG_FORMAT: logging (stderr only)

stdout carries the protocol channel exclusively. While the server runs,
anything else written to sys.stdout (stray print() calls included) is
redirected to stderr, as is every log line.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from datetime import datetime, timezone
from io import TextIOWrapper
from typing import Any, Optional

import anyio
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    ResourceTemplate,
    TextContent,
    Tool,
)

from . import __version__
from .api import APIClient, Endpoints
from .config import LOG_LEVELS, Config, ConfigurationError, get_config
from .constants import SERVER_NAME
from .models import input_schema, validate_arguments
from .prompts import PROMPTS, PROMPTS_BY_NAME, render_prompt
from .resources import (
    NAMESPACE_TEMPLATE,
    NAMESPACES_RESOURCE,
    STATIC_RESOURCES,
    read_resource,
)
from .tools import TOOLS, TOOLS_BY_NAME

logger = logging.getLogger(__name__)


# =============================================================================
# Logging
# =============================================================================

class _StructuredFormatter(logging.Formatter):
    """One JSON object per log record, for log shippers reading stderr."""

    def __init__(self, service: str = "moorcheh-mcp") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
        }
        if record.levelno >= logging.WARNING:
            entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }
        return json.dumps(entry)


def _setup_logging(level: int = logging.INFO, json_format: bool = False) -> None:
    """Install a single stderr handler on the package logger."""
    pkg_logger = logging.getLogger("moorcheh_mcp")
    pkg_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(_StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False


# =============================================================================
# Server
# =============================================================================

class MoorchehServer:
    """
    MCP server adapting the Moorcheh API.

    Holds one HTTP client for the life of the process. The decorated
    handlers registered on ``self.server`` are thin adapters onto the
    ``_list_*`` / ``_call_tool`` / ``_read_resource`` / ``_get_prompt``
    methods.
    """

    def __init__(self, config: Config, client: Optional[APIClient] = None) -> None:
        self.config = config
        self.client = client or APIClient(config.api_key, Endpoints(config.base_url))
        self.server = Server(SERVER_NAME, version=__version__)
        self._register_tools()
        self._register_resources()
        self._register_prompts()

    @staticmethod
    def _text_response(text: str) -> list[TextContent]:
        return [TextContent(type="text", text=text)]

    def _register_tools(self) -> None:
        """Register MCP tools."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self._list_tools()

        # Argument errors are reported as text by _call_tool
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            return await self._call_tool(name, arguments)

    def _register_resources(self) -> None:
        """Register MCP resources and the namespace template."""

        @self.server.list_resources()
        async def list_resources() -> list[Resource]:
            return self._list_resources()

        @self.server.list_resource_templates()
        async def list_resource_templates() -> list[ResourceTemplate]:
            return self._list_resource_templates()

        @self.server.read_resource()
        async def read(uri: Any) -> list[ReadResourceContents]:
            content, mime_type = await self._read_resource(str(uri))
            return [ReadResourceContents(content=content, mime_type=mime_type)]

    def _register_prompts(self) -> None:
        """Register MCP prompts."""

        @self.server.list_prompts()
        async def list_prompts() -> list[Prompt]:
            return self._list_prompts()

        @self.server.get_prompt()
        async def get_prompt(name: str, arguments: Optional[dict[str, str]]) -> GetPromptResult:
            return self._get_prompt(name, arguments)

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    def _list_tools(self) -> list[Tool]:
        return [
            Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=input_schema(tool.args_model),
            )
            for tool in TOOLS
        ]

    async def _call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> list[TextContent]:
        """
        Dispatch a tool call.

        Every outcome is text content: unknown tools, argument validation
        failures and handler errors included.
        """
        tool = TOOLS_BY_NAME.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return self._text_response(f"Unknown tool: {name}")

        validated = validate_arguments(tool.args_model, arguments)
        if not validated.ok:
            logger.info(f"Rejected arguments for {name}: {validated.error}")
            return self._text_response(f"Error: {validated.error}")

        try:
            text = await tool.handler(self.client, validated.value)
        except Exception:
            logger.exception(f"Error in tool {name}")
            return self._text_response(f"Error: internal server error in {name}")

        return self._text_response(text)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    def _list_resources(self) -> list[Resource]:
        specs = (NAMESPACES_RESOURCE, *STATIC_RESOURCES)
        return [
            Resource(
                uri=spec.uri,
                name=spec.name,
                description=spec.description,
                mimeType=spec.mime_type,
            )
            for spec in specs
        ]

    def _list_resource_templates(self) -> list[ResourceTemplate]:
        return [
            ResourceTemplate(
                uriTemplate=NAMESPACE_TEMPLATE.uri,
                name=NAMESPACE_TEMPLATE.name,
                description=NAMESPACE_TEMPLATE.description,
                mimeType=NAMESPACE_TEMPLATE.mime_type,
            )
        ]

    async def _read_resource(self, uri: str) -> tuple[str, str]:
        return await read_resource(self.client, uri)

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    def _list_prompts(self) -> list[Prompt]:
        return [
            Prompt(
                name=spec.name,
                description=spec.description,
                arguments=[
                    PromptArgument(name=arg.name, description=arg.description, required=False)
                    for arg in spec.arguments
                ],
            )
            for spec in PROMPTS
        ]

    def _get_prompt(self, name: str, arguments: Optional[dict[str, str]]) -> GetPromptResult:
        """
        Render a prompt as a single assistant message.

        Raises:
            ValueError: Unknown prompt or invalid argument value
        """
        text = render_prompt(name, arguments)
        return GetPromptResult(
            description=PROMPTS_BY_NAME[name].description,
            messages=[
                PromptMessage(
                    role="assistant",
                    content=TextContent(type="text", text=text),
                )
            ],
        )

    async def run(self, stdin: Any = None, stdout: Any = None) -> None:
        """
        Run the MCP server over stdio until the client disconnects.

        Args:
            stdin: Async text stream of incoming frames (default: process stdin)
            stdout: Async text stream for outgoing frames (default: process stdout)

        The protocol writer is bound before sys.stdout is redirected to
        stderr, so it is the only thing that reaches the channel.
        """
        if stdout is None:
            stdout = anyio.wrap_file(TextIOWrapper(sys.stdout.buffer, encoding="utf-8"))

        logger.info(f"Starting {SERVER_NAME} MCP server {__version__} ({self.config.base_url})")
        try:
            with contextlib.redirect_stdout(sys.stderr):
                async with stdio_server(stdin, stdout) as (read_stream, write_stream):
                    await self.server.run(
                        read_stream,
                        write_stream,
                        self.server.create_initialization_options()
                    )
        finally:
            await self.client.aclose()
            logger.info("MCP server stopped")


def main() -> int:
    """Entry point."""
    parser = argparse.ArgumentParser(description="Moorcheh MCP server (stdio)")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", choices=LOG_LEVELS, type=str.upper,
                        help="Log level (overrides MOORCHEH_LOG_LEVEL)")
    parser.add_argument("--json-logs", action="store_true",
                        help="Emit JSON log lines on stderr")
    args = parser.parse_args()

    try:
        config = get_config()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = args.log_level or config.log_level
    _setup_logging(
        level=getattr(logging, level),
        json_format=args.json_logs or config.json_logs,
    )

    server = MoorchehServer(config)
    asyncio.run(server.run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
