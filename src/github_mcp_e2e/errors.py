"""Harness error types and helpers.

Every fatal condition in the harness surfaces as a HarnessError. The code names the
category (transport, tool-reported, decode, timeout...) so tests can assert on it
without parsing messages. Messages must never contain the bearer token.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class HarnessError(Exception):
    """A fatal harness condition that aborts the current test.

    Not frozen: contextlib assigns __traceback__ when an error leaves an
    asynccontextmanager body.
    """

    code: str
    message: str
    hint: str | None = None
    tool: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        out = f"[{self.code}] {self.message}"
        if self.hint:
            out += f" ({self.hint})"
        return out


def config_error(message: str) -> HarnessError:
    """Error for missing or invalid harness configuration."""
    return HarnessError(code="Config", message=message)


def transport_error(tool: str, exc: BaseException) -> HarnessError:
    """Error for a failed round trip to the tool server.

    Never retried: the server under test is unreachable or broken.
    """
    return HarnessError(
        code="Transport",
        message=f"expected to call '{tool}' tool successfully",
        hint=f"{type(exc).__name__}: {exc}",
        tool=tool,
    )


def unexpected_tool_error(tool: str, detail: str) -> HarnessError:
    """Error for a tool result flagged isError when success was expected."""
    return HarnessError(
        code="ToolError",
        message=f"expected '{tool}' result not to be an error",
        hint=detail or None,
        tool=tool,
    )


def unexpected_success(tool: str) -> HarnessError:
    """Error for a tool result that succeeded when an error was expected."""
    return HarnessError(
        code="UnexpectedSuccess",
        message=f"expected '{tool}' result to be an error",
        tool=tool,
    )


def decode_error(message: str, hint: str | None = None) -> HarnessError:
    """Error for a response that does not match the expected structure."""
    return HarnessError(code="Decode", message=message, hint=hint)


def timeout_error(operation: str, deadline_s: float) -> HarnessError:
    """Error for an operation that lost its deadline race."""
    return HarnessError(
        code="Timeout",
        message=f"{operation} operation timed out after {deadline_s:g}s",
        tool=operation,
    )


def latency_error(message: str) -> HarnessError:
    """Error for a load batch that exceeded its time allowance."""
    return HarnessError(code="Latency", message=message)


def github_auth_forbidden(*, status_code: int) -> HarnessError:
    """Error for provider 401/403 responses on the verification backdoor."""
    return HarnessError(
        code="Forbidden",
        message="GitHub rejected the harness token for this operation",
        hint="The e2e token may be expired or missing the repo/delete_repo scopes",
        status_code=status_code,
    )
