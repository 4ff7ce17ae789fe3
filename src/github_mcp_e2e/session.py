"""Session bootstrap.

Launches the server under test over stdio and yields an initialized MCP client
session. By default the server runs in a throwaway docker container; in debug mode the
configured command runs directly on the host.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager

from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, get_default_environment, stdio_client

from .config import HarnessConfig

if sys.version_info < (3, 11):
    from exceptiongroup import BaseExceptionGroup

logger = logging.getLogger(__name__)


def server_environment(config: HarnessConfig) -> dict[str, str]:
    """Environment handed to the server process."""
    env = {
        "GITHUB_PERSONAL_ACCESS_TOKEN": config.token,
        "GITHUB_TOOLSETS": ",".join(config.server.toolsets),
    }
    if config.host:
        env["GITHUB_HOST"] = config.host
    if config.server.read_only:
        env["GITHUB_READ_ONLY"] = "1"
    if config.server.dynamic_toolsets:
        env["GITHUB_DYNAMIC_TOOLSETS"] = "1"
    return env


def server_parameters(config: HarnessConfig) -> StdioServerParameters:
    """Build the stdio launch parameters for the configured mode."""
    server_env = server_environment(config)
    # the child gets only this mapping; keep PATH and friends
    env = {**get_default_environment(), **server_env}
    if config.server.debug:
        command, *rest = config.server.command
        return StdioServerParameters(command=command, args=list(rest), env=env)

    # docker reads the values of bare `-e NAME` flags from its own environment
    docker_args = ["run", "-i", "--rm"]
    for name in sorted(server_env):
        docker_args.extend(["-e", name])
    docker_args.append(config.server.image)
    return StdioServerParameters(command="docker", args=docker_args, env=env)


def sole_exception(error: BaseException) -> BaseException:
    """Peel exception groups that each hold exactly one error."""
    while isinstance(error, BaseExceptionGroup) and len(error.exceptions) == 1:
        error = error.exceptions[0]
    return error


@contextmanager
def unwrap_task_group_errors() -> Iterator[None]:
    """Re-raise the one error an anyio task group wrapped on its way out.

    Test bodies run inside the transport's task groups, so a skip or a HarnessError
    leaving the body would otherwise surface as "unhandled errors in a TaskGroup".
    Groups carrying several errors propagate unchanged.
    """
    leaf: BaseException | None = None
    try:
        yield
    except BaseExceptionGroup as group:
        leaf = sole_exception(group)
        if isinstance(leaf, BaseExceptionGroup):
            raise
    if leaf is not None:
        raise leaf


@asynccontextmanager
async def open_session(config: HarnessConfig) -> AsyncIterator[ClientSession]:
    """Start the server and yield an initialized session; stop it on exit."""
    params = server_parameters(config)
    logger.info("Starting MCP server: %s %s", params.command, " ".join(params.args))
    with unwrap_task_group_errors():
        async with stdio_client(params) as (read_stream, write_stream):
            async with ClientSession(read_stream, write_stream) as session:
                init = await session.initialize()
                logger.info("Connected to %s %s", init.serverInfo.name, init.serverInfo.version)
                yield session
