"""pytest integration.

Live scenarios are marked `e2e` and only run with `pytest --e2e`. With the flag set a
missing token fails setup instead of silently skipping.

The session is opened inside the test body (`async with open_context() as ctx:`) rather
than in an async fixture, so the stdio transport is entered and exited by the same task.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

import pytest

from .config import HarnessConfig, load_config_from_env
from .context import TestContext, open_test_context
from .errors import HarnessError


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("github-mcp-e2e")
    group.addoption(
        "--e2e",
        action="store_true",
        default=False,
        help="Run end-to-end scenarios against a live GitHub MCP server.",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "e2e: end-to-end scenario against a live server (needs --e2e)")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--e2e"):
        return
    skip_e2e = pytest.mark.skip(reason="end-to-end scenario; run with --e2e")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


@pytest.fixture(scope="session")
def harness_config() -> HarnessConfig:
    """Configuration resolved once for the whole run."""
    try:
        return load_config_from_env()
    except HarnessError as err:
        pytest.fail(str(err), pytrace=False)


@pytest.fixture
def open_context(harness_config: HarnessConfig) -> Callable[[], AbstractAsyncContextManager[TestContext]]:
    """Factory for a fresh per-test context: `async with open_context() as ctx:`."""

    def factory() -> AbstractAsyncContextManager[TestContext]:
        return open_test_context(harness_config)

    return factory
