"""Remote resource lifecycle tracking.

Resources are created through tool calls and recorded on the owning test. Only
repositories carry a teardown action; branches, files, issues and pull requests are
deleted transitively with their repository. Teardown is best effort: it runs on every
exit path of the test scope, and its failures are logged, never raised, so they cannot
mask the real outcome of the test.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol

from . import arguments as args
from .client import ToolClient
from .decoding import decode_json
from .shapes import FileCommit, NumberRef

logger = logging.getLogger(__name__)

NAME_PREFIX = "github-mcp-server-e2e"

TeardownAction = Callable[[], Awaitable[object]]


def unix_millis() -> int:
    return time.time_ns() // 1_000_000


class ResourceKind(enum.Enum):
    REPOSITORY = "repository"
    BRANCH = "branch"
    FILE = "file"
    ISSUE = "issue"
    PULL_REQUEST = "pull_request"


@dataclass(frozen=True, slots=True)
class TrackedResource:
    kind: ResourceKind
    identifier: str | int
    parent_repository: str | None = None


class RepositoryDeleter(Protocol):
    async def delete_repository(self, owner: str, repo: str) -> None: ...


class TeardownStack:
    """Deferred async cleanup actions owned by one test scope.

    Use as `async with TeardownStack() as teardown:`; actions run in reverse
    registration order when the block exits, whatever the reason.
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, TeardownAction]] = []
        self._closed = False

    def __len__(self) -> int:
        return len(self._actions)

    def register(self, description: str, action: TeardownAction) -> None:
        if self._closed:
            raise RuntimeError("teardown already ran for this scope")
        self._actions.append((description, action))

    async def run(self) -> list[str]:
        """Run every action once, newest first. Returns descriptions of the failed ones."""
        self._closed = True
        failed: list[str] = []
        while self._actions:
            description, action = self._actions.pop()
            try:
                await action()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                failed.append(description)
                logger.warning("Warning: Failed to %s: %s", description, exc)
            else:
                logger.debug("Teardown: %s", description)
        return failed

    async def __aenter__(self) -> TeardownStack:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.run()
        return False


class ResourceTracker:
    """Creates remote resources through tools and records them for the test."""

    def __init__(
        self,
        client: ToolClient,
        *,
        owner: str,
        teardown: TeardownStack,
        provider: RepositoryDeleter,
        clock: Callable[[], int] = unix_millis,
    ) -> None:
        """Create a tracker.

        Args:
            client: Tool client for the owning test.
            owner: Login the repositories are created under.
            teardown: The owning test's teardown stack. Never shared between tests.
            provider: Backdoor used to delete repositories on teardown.
            clock: Millisecond timestamp source for unique names.
        """
        self._client = client
        self._owner = owner
        self._teardown = teardown
        self._provider = provider
        self._clock = clock
        self._resources: list[TrackedResource] = []

    @property
    def resources(self) -> list[TrackedResource]:
        return list(self._resources)

    def unique_name(self, prefix: str) -> str:
        return f"{prefix}-{self._clock()}"

    def _track(self, kind: ResourceKind, identifier: str | int, parent: str | None = None) -> None:
        self._resources.append(TrackedResource(kind=kind, identifier=identifier, parent_repository=parent))

    async def create_repository(
        self, prefix: str, *, private: bool = True, auto_init: bool = True, description: str | None = None
    ) -> str:
        """Create a uniquely named repository and register its deletion."""
        repo_name = self.unique_name(f"{NAME_PREFIX}-{prefix}")
        await self._client.run(
            args.create_repository(repo_name, private=private, auto_init=auto_init, description=description)
        )
        self.track_repository(repo_name)
        logger.info("Created test repository %s/%s", self._owner, repo_name)
        return repo_name

    def track_repository(self, repo_name: str) -> None:
        """Adopt a repository the test created with a direct tool call."""
        self._track(ResourceKind.REPOSITORY, repo_name)
        owner = self._owner

        async def delete() -> None:
            await self._provider.delete_repository(owner, repo_name)

        self._teardown.register(f"delete test repository {owner}/{repo_name}", delete)

    async def create_branch(self, repo: str, branch: str, from_branch: str = "main") -> None:
        await self._client.run(args.create_branch(self._owner, repo, branch, from_branch))
        self._track(ResourceKind.BRANCH, branch, repo)

    async def create_file(self, repo: str, branch: str, path: str, content: str, message: str) -> str:
        """Create or update a file; returns the commit sha."""
        result = await self._client.run(args.create_or_update_file(self._owner, repo, path, content, message, branch))
        self._track(ResourceKind.FILE, path, repo)
        return decode_json(result, FileCommit).commit.sha

    async def create_issue(self, repo: str, title: str, body: str | None = None) -> int:
        result = await self._client.run(args.create_issue(self._owner, repo, title, body))
        number = decode_json(result, NumberRef).number
        self._track(ResourceKind.ISSUE, number, repo)
        return number

    async def create_pull_request(self, repo: str, title: str, body: str | None, head: str, base: str) -> int:
        result = await self._client.run(args.create_pull_request(self._owner, repo, title, body, head, base))
        number = decode_json(result, NumberRef).number
        self._track(ResourceKind.PULL_REQUEST, number, repo)
        return number
