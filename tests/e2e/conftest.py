"""Shared setup flows for live scenarios.

Every flow goes through the tools under test; the REST backdoor is only used where a
tool cannot do the job (tags) or to verify state after teardown.
"""

from __future__ import annotations

from github_mcp_e2e.context import TestContext


async def repo_with_change(ctx: TestContext, prefix: str, branch: str, path: str = "feature.txt") -> str:
    """Repository with `branch` one commit ahead of main; ready for a pull request."""
    repo = await ctx.resources.create_repository(prefix)
    await ctx.resources.create_branch(repo, branch)
    await ctx.resources.create_file(repo, branch, path, f"change on {branch}\n", f"Add {path}")
    return repo


async def repo_with_pull_request(ctx: TestContext, prefix: str, title: str, body: str | None = None) -> tuple[str, int]:
    branch = ctx.unique_name("feature")
    repo = await repo_with_change(ctx, prefix, branch)
    number = await ctx.resources.create_pull_request(repo, title, body, branch, "main")
    return repo, number
