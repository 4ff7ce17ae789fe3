"""Configuration loading for github-mcp-e2e.

Configuration is read from the environment exactly once, at test-suite entry, and then
passed explicitly into every harness component. Nothing else in the package looks at
os.environ. The token is a secret and must never be emitted to logs or error messages.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from .errors import config_error

PUBLIC_HOST = "https://github.com"
PUBLIC_API_BASE_URL = "https://api.github.com"

# Toolsets the server enables when GITHUB_TOOLSETS is empty.
DEFAULT_TOOLSETS: tuple[str, ...] = ("context", "repos", "issues", "pull_requests", "users")

DEFAULT_IMAGE = "github/e2e-github-mcp-server"
DEFAULT_COMMAND: tuple[str, ...] = ("github-mcp-server", "stdio")
DEFAULT_RATE_LIMIT_DELAY_S = 1.0


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """How the server under test is launched and which toolsets it exposes."""

    toolsets: tuple[str, ...] = DEFAULT_TOOLSETS
    read_only: bool = False
    dynamic_toolsets: bool = False
    debug: bool = False
    image: str = DEFAULT_IMAGE
    command: tuple[str, ...] = DEFAULT_COMMAND


@dataclass(frozen=True, slots=True)
class LimitsConfig:
    """Timing knobs for pacing and for the verification backdoor."""

    # Pacing between tool calls made by load scenarios
    rate_limit_delay_s: float = DEFAULT_RATE_LIMIT_DELAY_S

    # Verification backdoor network limits
    total_timeout_s: float = 60.0
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 30.0
    max_attempts: int = 3
    max_backoff_s: float = 5.0


@dataclass(frozen=True, slots=True)
class HarnessConfig:
    """Everything the harness needs, resolved once."""

    token: str
    host: str | None
    server: ServerConfig
    limits: LimitsConfig
    call_log_path: Path | None = None

    @property
    def api_base_url(self) -> str:
        """REST API root for the configured host."""
        if self.host is None or self.host.rstrip("/") == PUBLIC_HOST:
            return PUBLIC_API_BASE_URL
        return f"{self.host.rstrip('/')}/api/v3"

    def __repr__(self) -> str:
        return (
            f"HarnessConfig(token='***', host={self.host!r}, server={self.server!r}, "
            f"limits={self.limits!r}, call_log_path={self.call_log_path!r})"
        )


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _parse_toolsets(value: str | None) -> tuple[str, ...]:
    if not value:
        return DEFAULT_TOOLSETS
    parts = [p.strip() for p in value.split(",")]
    toolsets = tuple(p for p in parts if p)
    return toolsets or DEFAULT_TOOLSETS


def _parse_host(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    host = value.strip().rstrip("/")
    parsed = urlparse(host)
    if parsed.scheme != "https" or not parsed.netloc:
        raise config_error("GITHUB_MCP_SERVER_E2E_HOST must be an https:// URL when set")
    return host


def _parse_non_negative_float(name: str, value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise config_error(f"{name} must be a number") from exc
    if parsed < 0:
        raise config_error(f"{name} must not be negative")
    return parsed


def load_config_from_env(environ: Mapping[str, str] | None = None) -> HarnessConfig:
    """Load and validate harness configuration.

    Args:
        environ: Mapping to read from; defaults to the process environment.

    Raises:
        HarnessError: If the token is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ

    token = (env.get("GITHUB_MCP_SERVER_E2E_TOKEN") or "").strip()
    if not token:
        raise config_error("GITHUB_MCP_SERVER_E2E_TOKEN environment variable is not set")

    host = _parse_host(env.get("GITHUB_MCP_SERVER_E2E_HOST"))

    command_raw = env.get("GITHUB_MCP_SERVER_E2E_COMMAND")
    command = tuple(shlex.split(command_raw)) if command_raw and command_raw.strip() else DEFAULT_COMMAND
    server = ServerConfig(
        toolsets=_parse_toolsets(env.get("GITHUB_TOOLSETS")),
        read_only=_parse_bool(env.get("GITHUB_READ_ONLY")),
        dynamic_toolsets=_parse_bool(env.get("GITHUB_DYNAMIC_TOOLSETS")),
        debug=_parse_bool(env.get("GITHUB_MCP_SERVER_E2E_DEBUG")),
        image=(env.get("GITHUB_MCP_SERVER_E2E_IMAGE") or "").strip() or DEFAULT_IMAGE,
        command=command,
    )

    limits = LimitsConfig(
        rate_limit_delay_s=_parse_non_negative_float(
            "GITHUB_MCP_SERVER_E2E_RATE_LIMIT_DELAY",
            env.get("GITHUB_MCP_SERVER_E2E_RATE_LIMIT_DELAY"),
            DEFAULT_RATE_LIMIT_DELAY_S,
        ),
    )

    call_log_raw = env.get("GITHUB_MCP_SERVER_E2E_CALL_LOG")
    call_log_path: Path | None = None
    if call_log_raw:
        p = Path(call_log_raw)
        if not p.is_absolute():
            raise config_error("GITHUB_MCP_SERVER_E2E_CALL_LOG must be an absolute path when set")
        call_log_path = p

    return HarnessConfig(
        token=token,
        host=host,
        server=server,
        limits=limits,
        call_log_path=call_log_path,
    )
