"""GitHub REST client used as a verification backdoor.

Scenarios use it to check state the tools produced (a deleted repository is really
gone) and for out-of-band setup the tools cannot do (tags). It must never perform the
actions the tools under test are meant to perform.

Provides:
- bearer-token auth and enterprise host support
- bounded retries with backoff on 429/5xx/transport errors
- finite timeouts
- error translation into HarnessError (NotFound, Forbidden, GitHub, Network)
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from .config import HarnessConfig, LimitsConfig
from .errors import HarnessError, github_auth_forbidden

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RequestBudget:
    """Budget for a single backdoor request."""

    total_timeout_s: float


class GitHubRestClient:
    """Minimal GitHub REST client for verification and setup."""

    def __init__(
        self,
        *,
        token: str,
        limits: LimitsConfig,
        api_base_url: str = "https://api.github.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a REST client.

        Args:
            token: Bearer token (the e2e token).
            limits: Timeouts/retry limits.
            api_base_url: https://api.github.com or an enterprise `<host>/api/v3`.
            transport: Optional httpx transport for tests.
        """
        self._token = token
        self._limits = limits
        self._api_base_url = api_base_url.rstrip("/")
        self._transport = transport

        if not self._api_base_url.startswith("https://"):
            raise HarnessError(code="Config", message="GitHub API base URL must use https")

    @classmethod
    def from_config(cls, config: HarnessConfig, transport: httpx.AsyncBaseTransport | None = None) -> GitHubRestClient:
        return cls(token=config.token, limits=config.limits, api_base_url=config.api_base_url, transport=transport)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _budget(self) -> RequestBudget:
        return RequestBudget(total_timeout_s=self._limits.total_timeout_s)

    def _compute_backoff_s(self, attempt_index: int) -> float:
        # attempt_index: 1 for first retry, 2 for second retry...
        base = min(self._limits.max_backoff_s, 0.5 * (2 ** (attempt_index - 1)))
        jitter = min(0.05, 0.01 * attempt_index)
        return min(self._limits.max_backoff_s, base + jitter)

    def _is_retryable(self, status_code: int | None, exc: Exception | None) -> bool:
        if exc is not None:
            return isinstance(exc, (httpx.TimeoutException, httpx.TransportError))
        if status_code is None:
            return False
        if status_code == 429:
            return True
        return 500 <= status_code <= 599

    async def request_json(
        self,
        *,
        method: str,
        path: str,
        json_body: dict | None = None,
        params: dict[str, str] | None = None,
        budget: RequestBudget | None = None,
    ) -> object:
        """Make a request and return decoded JSON (None for empty bodies such as 204)."""
        url = f"{self._api_base_url}{path}"
        budget = budget or self._budget()

        timeout = httpx.Timeout(
            timeout=min(budget.total_timeout_s, self._limits.total_timeout_s),
            connect=self._limits.connect_timeout_s,
            read=self._limits.read_timeout_s,
        )

        last_exc: Exception | None = None
        last_status: int | None = None

        async with httpx.AsyncClient(
            follow_redirects=False,
            timeout=timeout,
            transport=self._transport,
        ) as client:
            for attempt in range(1, self._limits.max_attempts + 1):
                try:
                    resp = await client.request(
                        method,
                        url,
                        headers=self._headers(),
                        json=json_body,
                        params=params,
                    )
                    last_status = resp.status_code

                    if resp.status_code >= 400:
                        hint = None
                        try:
                            err_payload = resp.json()
                            if isinstance(err_payload, dict) and isinstance(err_payload.get("message"), str):
                                hint = err_payload.get("message")
                        except ValueError:
                            hint = None

                        if resp.status_code in (401, 403):
                            raise github_auth_forbidden(status_code=resp.status_code)

                        if resp.status_code == 404:
                            raise HarnessError(
                                code="NotFound",
                                message=f"GitHub resource not found: {method} {path}",
                                hint=hint,
                                status_code=404,
                            )

                        if attempt < self._limits.max_attempts and self._is_retryable(resp.status_code, None):
                            delay = self._compute_backoff_s(attempt)
                            logger.debug("GitHub %s %s returned %s; retrying in %.2fs", method, path, resp.status_code, delay)
                            await asyncio.sleep(delay)
                            continue

                        raise HarnessError(
                            code="GitHub",
                            message=f"GitHub request failed: {method} {path}",
                            hint=hint,
                            status_code=resp.status_code,
                        )

                    if not resp.content:
                        return None
                    try:
                        return resp.json()
                    except json.JSONDecodeError as exc:
                        raise HarnessError(code="GitHub", message="GitHub returned invalid JSON") from exc

                except HarnessError:
                    raise
                except Exception as exc:  # pylint: disable=broad-exception-caught
                    last_exc = exc
                    if attempt < self._limits.max_attempts and self._is_retryable(None, exc):
                        await asyncio.sleep(self._compute_backoff_s(attempt))
                        continue
                    raise HarnessError(code="Network", message="GitHub request failed at the network level") from exc

        raise HarnessError(code="Network", message=f"Request failed (status={last_status})") from last_exc

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        data = await self.request_json(method="GET", path=self._repo_path(owner, repo))
        if not isinstance(data, dict):
            raise HarnessError(code="GitHub", message="Unexpected repository payload")
        return data

    async def repository_exists(self, owner: str, repo: str) -> bool:
        """Return False only on a not-found answer; other failures propagate."""
        try:
            await self.get_repository(owner, repo)
        except HarnessError as err:
            if err.code == "NotFound":
                return False
            raise
        return True

    async def delete_repository(self, owner: str, repo: str) -> None:
        await self.request_json(method="DELETE", path=self._repo_path(owner, repo))

    async def get_ref(self, owner: str, repo: str, ref: str) -> dict[str, Any]:
        """Fetch a git ref such as `heads/main`."""
        data = await self.request_json(method="GET", path=f"{self._repo_path(owner, repo)}/git/ref/{ref}")
        if not isinstance(data, dict):
            raise HarnessError(code="GitHub", message="Unexpected ref payload")
        return data

    async def create_tag_object(self, owner: str, repo: str, *, tag: str, message: str, sha: str) -> dict[str, Any]:
        data = await self.request_json(
            method="POST",
            path=f"{self._repo_path(owner, repo)}/git/tags",
            json_body={"tag": tag, "message": message, "object": sha, "type": "commit"},
        )
        if not isinstance(data, dict):
            raise HarnessError(code="GitHub", message="Unexpected tag payload")
        return data

    async def create_ref(self, owner: str, repo: str, *, ref: str, sha: str) -> dict[str, Any]:
        data = await self.request_json(
            method="POST",
            path=f"{self._repo_path(owner, repo)}/git/refs",
            json_body={"ref": ref, "sha": sha},
        )
        if not isinstance(data, dict):
            raise HarnessError(code="GitHub", message="Unexpected ref payload")
        return data

    async def create_annotated_tag(
        self, owner: str, repo: str, *, tag: str, branch: str = "main", message: str | None = None
    ) -> str:
        """Tag the tip of `branch`; returns the tagged commit sha."""
        ref = await self.get_ref(owner, repo, f"heads/{branch}")
        commit_sha = ref["object"]["sha"]
        tag_obj = await self.create_tag_object(
            owner, repo, tag=tag, message=message or f"Test tag {tag}", sha=commit_sha
        )
        await self.create_ref(owner, repo, ref=f"refs/tags/{tag}", sha=tag_obj["sha"])
        return commit_sha
