"""Capability probing.

The server's toolset varies per run (GITHUB_TOOLSETS, read-only mode, dynamic
toolsets), so availability is queried from the live session and never cached by the
prober. A listing is returned as an immutable CapabilitySet; tests that expect the set
to change re-query explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import pytest

from .client import ToolSession
from .errors import transport_error

logger = logging.getLogger(__name__)

LIST_TOOLS = "tools/list"

# Guard against a server that keeps handing back a cursor.
_MAX_PAGES = 100


@dataclass(frozen=True, slots=True)
class CapabilitySet:
    """Names of the tools a session exposed at one point in time."""

    names: frozenset[str]

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.names))

    def __len__(self) -> int:
        return len(self.names)

    def missing(self, names: Iterable[str]) -> list[str]:
        """Return the given names that are not available, in the order given."""
        return [n for n in names if n not in self.names]


def skip_message(tool_name: str) -> str:
    return f"Tool '{tool_name}' is not available in current toolset"


class CapabilityProber:
    """Answers which tools the server currently exposes."""

    def __init__(self, session: ToolSession) -> None:
        self._session = session

    async def list_available(self) -> CapabilitySet:
        """List tool names, following pagination. One logical round trip per call."""
        names: set[str] = set()
        cursor: str | None = None
        try:
            for _ in range(_MAX_PAGES):
                if cursor is None:
                    page = await self._session.list_tools()
                else:
                    page = await self._session.list_tools(cursor=cursor)
                names.update(tool.name for tool in page.tools)
                cursor = page.nextCursor
                if not cursor:
                    break
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise transport_error(LIST_TOOLS, exc) from exc

        logger.debug("Server exposes %s tools", len(names))
        return CapabilitySet(names=frozenset(names))

    async def is_available(self, tool_name: str) -> bool:
        return tool_name in await self.list_available()

    async def skip_unless_available(self, *tool_names: str) -> CapabilitySet:
        """Skip (not fail) the current test when any of the tools is absent.

        Never invokes the tools themselves. Returns the listing it checked against.
        """
        available = await self.list_available()
        missing = available.missing(tool_names)
        if missing:
            logger.info("Skipping: %s", skip_message(missing[0]))
            pytest.skip(skip_message(missing[0]))
        return available
