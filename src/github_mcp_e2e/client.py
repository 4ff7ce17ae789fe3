"""Tool invocation client.

Thin request/response wrapper around an MCP client session. It enforces the
success/error expectation of each call and turns every failure into a HarnessError
that aborts the current test only. There are no retries.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Protocol

from mcp.types import CallToolResult, ListToolsResult

from .arguments import ToolCall
from .calllog import CallEvent, CallLogger, elapsed_ms, new_correlation_id
from .decoding import error_text
from .errors import transport_error, unexpected_success, unexpected_tool_error
from .safety import redact_arguments, redact_text

logger = logging.getLogger(__name__)


class ToolSession(Protocol):
    """The part of mcp.ClientSession the harness relies on."""

    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> CallToolResult: ...

    async def list_tools(self, cursor: str | None = None) -> ListToolsResult: ...


class ToolClient:
    """Invokes tools on a live session and checks the error flag."""

    def __init__(
        self,
        session: ToolSession,
        *,
        call_log: CallLogger | None = None,
        secrets: tuple[str, ...] = (),
    ) -> None:
        """Create a client.

        Args:
            session: Initialized MCP session (shared read-only across workers).
            call_log: Where per-call events go; a stderr-only logger when omitted.
            secrets: Values masked in anything logged (the e2e token).
        """
        self._session = session
        self._call_log = call_log if call_log is not None else CallLogger()
        self._secrets = secrets

    @property
    def session(self) -> ToolSession:
        return self._session

    @property
    def call_log(self) -> CallLogger:
        return self._call_log

    async def call(self, name: str, arguments: Mapping[str, Any] | None = None) -> CallToolResult:
        """Call a tool that is expected to succeed."""
        return await self.run(ToolCall(name=name, arguments=arguments or {}))

    async def call_expecting_error(self, name: str, arguments: Mapping[str, Any] | None = None) -> CallToolResult:
        """Call a tool that is expected to report an error result."""
        return await self.run_expecting_error(ToolCall(name=name, arguments=arguments or {}))

    async def run(self, call: ToolCall) -> CallToolResult:
        """Issue a built ToolCall that is expected to succeed."""
        result = await self._invoke(call, expect_error=False)
        if result.isError:
            raise unexpected_tool_error(call.name, redact_text(error_text(result), *self._secrets))
        return result

    async def run_expecting_error(self, call: ToolCall) -> CallToolResult:
        """Issue a built ToolCall that is expected to fail on the server side."""
        result = await self._invoke(call, expect_error=True)
        if not result.isError:
            raise unexpected_success(call.name)
        return result

    async def _invoke(self, call: ToolCall, *, expect_error: bool) -> CallToolResult:
        correlation_id = new_correlation_id()
        start = time.monotonic()
        logger.debug(
            "Calling %s (%s) with %s",
            call.name,
            correlation_id,
            redact_arguments(dict(call.arguments), *self._secrets),
        )

        try:
            result = await self._session.call_tool(call.name, call.as_request_arguments())
        except Exception as exc:  # pylint: disable=broad-exception-caught
            err = transport_error(call.name, exc)
            reason = redact_text(err.hint or "", *self._secrets)
            self._write(correlation_id, call.name, "transport_error", reason, start)
            raise err from exc

        if result.isError:
            outcome = "expected_error" if expect_error else "tool_error"
            reason = redact_text(error_text(result), *self._secrets)[:500] or None
        else:
            outcome = "unexpected_success" if expect_error else "succeeded"
            reason = None
        self._write(correlation_id, call.name, outcome, reason, start)
        return result

    def _write(self, correlation_id: str, tool: str, outcome: str, reason: str | None, start: float) -> None:
        self._call_log.write_event(
            CallEvent(
                correlation_id=correlation_id,
                tool=tool,
                outcome=outcome,
                duration_ms=elapsed_ms(start),
                reason=reason,
            )
        )
