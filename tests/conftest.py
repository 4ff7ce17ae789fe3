"""Shared fakes for harness unit tests.

The fake session speaks the same types as mcp.ClientSession (CallToolResult,
ListToolsResult) so the harness code under test cannot tell the difference. Nothing
here touches the network.
"""

from __future__ import annotations

import inspect
import json
from collections.abc import Callable
from typing import Any

import pytest
from github_mcp_e2e.calllog import CallLogger
from github_mcp_e2e.config import HarnessConfig, LimitsConfig, ServerConfig
from mcp.types import (
    CallToolResult,
    EmbeddedResource,
    ListToolsResult,
    TextContent,
    TextResourceContents,
    Tool,
)

Handler = Callable[[dict[str, Any]], Any]

TEST_TOKEN = "ghp_" + "x" * 36


def text_result(payload: object, *, is_error: bool = False) -> CallToolResult:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def file_result(text: str, *, uri: str = "repo://octo/repo/contents/file.txt") -> CallToolResult:
    return CallToolResult(
        content=[
            TextContent(type="text", text="successfully downloaded text file"),
            EmbeddedResource(
                type="resource",
                resource=TextResourceContents(uri=uri, mimeType="text/plain", text=text),
            ),
        ],
        isError=False,
    )


class FakeSession:
    """In-memory stand-in for mcp.ClientSession."""

    def __init__(
        self,
        tools: list[str] | None = None,
        handlers: dict[str, Handler] | None = None,
        *,
        page_size: int | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.tool_names = list(tools if tools is not None else (handlers or {}).keys())
        self.handlers: dict[str, Handler] = dict(handlers or {})
        self.page_size = page_size
        self.list_error = list_error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.list_calls = 0

    def on(self, name: str, handler: Handler) -> None:
        self.handlers[name] = handler
        if name not in self.tool_names:
            self.tool_names.append(name)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult:
        args = dict(arguments or {})
        self.calls.append((name, args))
        handler = self.handlers.get(name)
        if handler is None:
            raise AssertionError(f"Unexpected tool call: {name}")
        out = handler(args)
        if inspect.isawaitable(out):
            out = await out
        if isinstance(out, Exception):
            raise out
        return out

    async def list_tools(self, cursor: str | None = None) -> ListToolsResult:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        start = int(cursor) if cursor else 0
        size = self.page_size or len(self.tool_names) or 1
        page = self.tool_names[start : start + size]
        next_start = start + size
        next_cursor = str(next_start) if next_start < len(self.tool_names) else None
        tools = [Tool(name=n, description=n, inputSchema={"type": "object"}) for n in page]
        return ListToolsResult(tools=tools, nextCursor=next_cursor)

    def called(self, name: str) -> list[dict[str, Any]]:
        return [args for tool, args in self.calls if tool == name]


class FakeProvider:
    """Records repository deletions; optionally fails them."""

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.deleted: list[tuple[str, str]] = []
        self.fail_with = fail_with

    async def delete_repository(self, owner: str, repo: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.deleted.append((owner, repo))


@pytest.fixture
def offline_config() -> HarnessConfig:
    """Offline configuration; no environment lookups."""
    return HarnessConfig(
        token=TEST_TOKEN,
        host=None,
        server=ServerConfig(),
        limits=LimitsConfig(rate_limit_delay_s=0.0, max_attempts=3, max_backoff_s=0.0),
    )


@pytest.fixture
def call_log() -> CallLogger:
    return CallLogger(echo_stderr=False)
