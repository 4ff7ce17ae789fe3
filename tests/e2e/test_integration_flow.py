"""Live scenarios: multi-step workflows and teardown verification."""

from __future__ import annotations

import pytest
from github_mcp_e2e import arguments as args
from github_mcp_e2e.decoding import decode_json, extract_embedded_text
from github_mcp_e2e.shapes import Branch, Issue, MergeResult, PullRequest

from .conftest import repo_with_change

pytestmark = [pytest.mark.e2e, pytest.mark.asyncio]


async def test_complete_repository_lifecycle(open_context) -> None:
    async with open_context() as ctx:
        await ctx.prober.skip_unless_available(
            "create_pull_request", "add_pull_request_comment", "create_pull_request_review", "merge_pull_request"
        )
        ctx.log_step("Testing complete repository lifecycle")
        branch = ctx.unique_name("feature")
        repo = await repo_with_change(ctx, "lifecycle", branch, "src/feature.py")

        number = await ctx.resources.create_pull_request(repo, "Add new feature", "Implements the feature", branch, "main")
        await ctx.client.run(args.add_pull_request_comment(ctx.owner, repo, number, "Looks good, one nit."))
        await ctx.client.run(args.create_pull_request_review(ctx.owner, repo, number, "COMMENT", "Reviewed"))
        merged = decode_json(
            await ctx.client.run(
                args.merge_pull_request(ctx.owner, repo, number, "squash", commit_title="Add new feature")
            ),
            MergeResult,
        )
        assert merged.merged, "expected PR to be merged successfully"

        fetched = await ctx.client.run(args.get_file_contents(ctx.owner, repo, "src/feature.py", "main"))
        assert extract_embedded_text(fetched) == f"change on {branch}\n"
        ctx.log_result("Repository lifecycle completed for %s", repo)


async def test_issue_management_workflow(open_context) -> None:
    async with open_context() as ctx:
        await ctx.prober.skip_unless_available(
            "create_issue", "add_issue_labels", "add_issue_assignees", "add_issue_comment", "update_issue", "get_issue"
        )
        repo = await ctx.resources.create_repository("issues")

        number = await ctx.resources.create_issue(repo, "Bug: something breaks", "Steps to reproduce")
        await ctx.client.run(args.add_issue_labels(ctx.owner, repo, number, ["bug"]))
        await ctx.client.run(args.add_issue_assignees(ctx.owner, repo, number, [ctx.owner]))
        await ctx.client.run(args.add_issue_comment(ctx.owner, repo, number, "Working on a fix."))
        await ctx.client.run(args.update_issue(ctx.owner, repo, number, state="closed"))

        issue = decode_json(await ctx.client.run(args.get_issue(ctx.owner, repo, number)), Issue)
        assert issue.state == "closed"


async def test_multi_branch_workflow(open_context) -> None:
    async with open_context() as ctx:
        await ctx.prober.skip_unless_available("list_branches", "list_pull_requests")
        repo = await ctx.resources.create_repository("multi-branch")
        branches = [f"feature-{n}" for n in range(1, 4)]

        for branch in branches:
            await ctx.resources.create_branch(repo, branch)
            await ctx.resources.create_file(repo, branch, f"{branch}.txt", branch, f"Add {branch}")
            await ctx.resources.create_pull_request(repo, f"Merge {branch}", None, branch, "main")

        listed = decode_json(await ctx.client.run(args.list_branches(ctx.owner, repo)), list[Branch])
        names = {b.name for b in listed}
        assert names >= {"main", *branches}

        prs = decode_json(await ctx.client.run(args.list_pull_requests(ctx.owner, repo, "open")), list[PullRequest])
        assert len(prs) == len(branches)


async def test_error_recovery_workflow(open_context) -> None:
    async with open_context() as ctx:
        await ctx.prober.skip_unless_available("get_issue", "get_pull_request", "create_pull_request")
        ctx.log_step("Testing invalid operations")
        branch = ctx.unique_name("feature")
        repo = await repo_with_change(ctx, "recovery", branch)

        await ctx.client.run_expecting_error(args.get_issue(ctx.owner, repo, 99999))
        await ctx.client.run_expecting_error(args.get_pull_request(ctx.owner, repo, 99999))

        # the session keeps working after tool errors
        issue_number = await ctx.resources.create_issue(repo, "Valid issue")
        pr_number = await ctx.resources.create_pull_request(repo, "Valid PR", None, branch, "main")
        decode_json(await ctx.client.run(args.get_issue(ctx.owner, repo, issue_number)), Issue)
        decode_json(await ctx.client.run(args.get_pull_request(ctx.owner, repo, pr_number)), PullRequest)


async def test_repository_is_deleted_when_context_closes(open_context) -> None:
    async with open_context() as ctx:
        await ctx.prober.skip_unless_available("create_repository")
        repo = await ctx.resources.create_repository("cleanup")
        provider = ctx.provider
        owner = ctx.owner
        assert await provider.repository_exists(owner, repo)

    assert not await provider.repository_exists(owner, repo)
