"""Per-test context.

A TestContext bundles what one test needs: the owner login (resolved once through the
`get_me` tool), the tool client, the capability prober, the resource tracker and the
configuration. It is built inside a scope whose exit always runs the test's teardown
before the session is closed.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass

from . import arguments as args
from .calllog import CallLogger
from .capabilities import CapabilityProber
from .client import ToolClient, ToolSession
from .config import HarnessConfig
from .decoding import decode_json
from .github_rest import GitHubRestClient
from .load import rate_limit_pause
from .resources import ResourceTracker, TeardownStack, unix_millis
from .session import open_session, unwrap_task_group_errors
from .shapes import User

logger = logging.getLogger(__name__)

SessionFactory = Callable[[HarnessConfig], AbstractAsyncContextManager[ToolSession]]


@dataclass(frozen=True, slots=True)
class TestContext:
    """Everything one test uses to talk to the server under test."""

    __test__ = False

    owner: str
    client: ToolClient
    prober: CapabilityProber
    resources: ResourceTracker
    provider: GitHubRestClient
    config: HarnessConfig
    clock: Callable[[], int] = unix_millis

    def unique_name(self, prefix: str) -> str:
        return self.resources.unique_name(prefix)

    def log_step(self, step: str, *values: object) -> None:
        logger.info("🔄 " + step, *values)

    def log_result(self, result: str, *values: object) -> None:
        logger.info("✅ " + result, *values)

    async def wait_for_rate_limit(self) -> None:
        """Fixed delay between calls to stay under provider rate limits."""
        await rate_limit_pause(self.config.limits.rate_limit_delay_s)


def build_call_log(config: HarnessConfig) -> CallLogger:
    return CallLogger(sink_path=config.call_log_path)


async def resolve_owner(client: ToolClient) -> str:
    """Login of the authenticated user, via the `get_me` tool."""
    result = await client.run(args.get_me())
    return decode_json(result, User).login


async def create_test_context(
    session: ToolSession,
    config: HarnessConfig,
    *,
    teardown: TeardownStack,
    provider: GitHubRestClient | None = None,
    call_log: CallLogger | None = None,
    clock: Callable[[], int] = unix_millis,
) -> TestContext:
    """Build a context on an open session; teardown stays owned by the caller's scope."""
    client = ToolClient(
        session,
        call_log=call_log if call_log is not None else build_call_log(config),
        secrets=(config.token,),
    )
    provider = provider if provider is not None else GitHubRestClient.from_config(config)
    owner = await resolve_owner(client)
    logger.debug("Resolved test owner %s", owner)
    return TestContext(
        owner=owner,
        client=client,
        prober=CapabilityProber(session),
        resources=ResourceTracker(client, owner=owner, teardown=teardown, provider=provider, clock=clock),
        provider=provider,
        config=config,
        clock=clock,
    )


@asynccontextmanager
async def open_test_context(
    config: HarnessConfig,
    *,
    session_factory: SessionFactory = open_session,
    provider: GitHubRestClient | None = None,
    call_log: CallLogger | None = None,
    clock: Callable[[], int] = unix_millis,
) -> AsyncIterator[TestContext]:
    """Open a session, yield a TestContext, and tear down on every exit path.

    Teardown runs before the session closes, after the body finishes, fails or skips.
    """
    with unwrap_task_group_errors():
        async with session_factory(config) as session:
            async with TeardownStack() as teardown:
                yield await create_test_context(
                    session,
                    config,
                    teardown=teardown,
                    provider=provider,
                    call_log=call_log,
                    clock=clock,
                )
