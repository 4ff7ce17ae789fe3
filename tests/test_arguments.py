"""Tool-call builders and argument validation."""

from __future__ import annotations

import pytest
from github_mcp_e2e import arguments as args
from github_mcp_e2e.arguments import TOOL_ARGUMENTS, ToolCall, validate_tool_arguments
from github_mcp_e2e.errors import HarnessError


def test_builders_spell_wire_key_names() -> None:
    assert args.get_issue("octo", "repo", 3).arguments == {"owner": "octo", "repo": "repo", "issueNumber": 3}
    assert args.get_pull_request("octo", "repo", 4).arguments == {"owner": "octo", "repo": "repo", "pullNumber": 4}
    assert args.create_branch("octo", "repo", "feature").arguments == {
        "owner": "octo",
        "repo": "repo",
        "branch": "feature",
        "from_branch": "main",
    }
    assert args.create_repository("r").arguments == {"name": "r", "private": True, "autoInit": True}


def test_builders_drop_unset_optional_fields() -> None:
    call = args.get_file_contents("octo", "repo", "README.md")
    assert "branch" not in call.arguments

    call = args.create_or_update_file("octo", "repo", "a.txt", "hi", "add", "main")
    assert "sha" not in call.arguments

    call = args.merge_pull_request("octo", "repo", 1, "squash", commit_title="t")
    assert call.arguments["mergeMethod"] == "squash"
    assert call.arguments["commitTitle"] == "t"
    assert "commitMessage" not in call.arguments


def test_every_builder_targets_a_declared_tool() -> None:
    calls = [
        args.get_me(),
        args.get_teams(),
        args.get_team_members("org", "team"),
        args.get_repository("o", "r"),
        args.list_repositories(),
        args.search_repositories("q"),
        args.list_branches("o", "r"),
        args.delete_file("o", "r", "p", "m", "main"),
        args.list_commits("o", "r"),
        args.get_commit("o", "r", "abc"),
        args.list_tags("o", "r"),
        args.get_tag("o", "r", "v1"),
        args.create_issue("o", "r", "t"),
        args.update_issue("o", "r", 1, state="closed"),
        args.add_issue_comment("o", "r", 1, "b"),
        args.add_issue_labels("o", "r", 1, ["bug"]),
        args.add_issue_assignees("o", "r", 1, ["octo"]),
        args.create_pull_request("o", "r", "t", None, "feature", "main"),
        args.list_pull_requests("o", "r", "open"),
        args.update_pull_request("o", "r", 1, title="t"),
        args.add_pull_request_comment("o", "r", 1, "b"),
        args.create_pull_request_review("o", "r", 1, "COMMENT", "looks fine"),
        args.get_pull_request_reviews("o", "r", 1),
    ]
    for call in calls:
        assert call.name in TOOL_ARGUMENTS


def test_negative_path_values_are_not_range_checked() -> None:
    call = args.get_issue("octo", "repo", -1)
    assert call.arguments["issueNumber"] == -1

    call = args.create_branch("octo", "repo", "")
    assert call.arguments["branch"] == ""


def test_validate_rejects_unknown_tool() -> None:
    with pytest.raises(HarnessError) as exc:
        validate_tool_arguments("nope", {})
    assert exc.value.code == "Arguments"


def test_validate_rejects_missing_required_field() -> None:
    with pytest.raises(HarnessError) as exc:
        validate_tool_arguments("get_issue", {"owner": "o", "repo": "r"})
    assert exc.value.message == "Missing required field: issueNumber"


def test_validate_rejects_undeclared_fields() -> None:
    with pytest.raises(HarnessError) as exc:
        validate_tool_arguments("get_me", {"zeta": 1, "alpha": 2})
    assert exc.value.message == "Undeclared fields for get_me: alpha, zeta"


@pytest.mark.parametrize(
    ("tool", "arguments", "fragment"),
    [
        ("get_issue", {"owner": "o", "repo": "r", "issueNumber": "3"}, "must be an integer"),
        ("get_issue", {"owner": "o", "repo": "r", "issueNumber": True}, "must be an integer"),
        ("get_repository", {"owner": 1, "repo": "r"}, "must be a string"),
        ("create_repository", {"name": "r", "private": "yes"}, "must be a boolean"),
        ("add_issue_labels", {"owner": "o", "repo": "r", "issueNumber": 1, "labels": "bug"}, "must be an array"),
        ("merge_pull_request", {"owner": "o", "repo": "r", "pullNumber": 1, "mergeMethod": "octopus"}, "one of"),
    ],
)
def test_validate_rejects_wrong_types(tool: str, arguments: dict, fragment: str) -> None:
    with pytest.raises(HarnessError) as exc:
        validate_tool_arguments(tool, arguments)
    assert fragment in exc.value.message


def test_tool_call_copies_arguments() -> None:
    labels = ["bug"]
    source = {"owner": "o", "repo": "r", "issueNumber": 1, "labels": labels}
    call = ToolCall(name="add_issue_labels", arguments=source)

    source["owner"] = "changed"
    labels.append("later")

    assert call.arguments["owner"] == "o"
    assert call.arguments["labels"] == ["bug"]

    request = call.as_request_arguments()
    request["labels"].append("mutated")
    assert call.arguments["labels"] == ["bug"]
