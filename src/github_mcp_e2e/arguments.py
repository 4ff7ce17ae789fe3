"""Typed tool-call builders.

The tool surface is server-defined and open ended, so at the wire boundary arguments
stay a plain mapping. Call sites still go through one builder per tool so key names
(`issueNumber`, `pullNumber`, `from_branch`, `autoInit`...) are spelled in exactly
one place. Every builder validates its output against TOOL_ARGUMENTS.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import HarnessError

_OWNER_REPO = {
    "owner": {"type": "string"},
    "repo": {"type": "string"},
}

TOOL_ARGUMENTS: dict[str, dict[str, Any]] = {
    # context
    "get_me": {"required": [], "properties": {}},
    "get_teams": {"required": [], "properties": {"user": {"type": "string"}}},
    "get_team_members": {
        "required": ["org", "team_slug"],
        "properties": {"org": {"type": "string"}, "team_slug": {"type": "string"}},
    },
    # repos
    "create_repository": {
        "required": ["name"],
        "properties": {
            "name": {"type": "string"},
            "description": {"type": "string"},
            "private": {"type": "boolean"},
            "autoInit": {"type": "boolean"},
        },
    },
    "get_repository": {"required": ["owner", "repo"], "properties": dict(_OWNER_REPO)},
    "list_repositories": {"required": [], "properties": {"user": {"type": "string"}}},
    "search_repositories": {"required": ["query"], "properties": {"query": {"type": "string"}}},
    "list_branches": {"required": ["owner", "repo"], "properties": dict(_OWNER_REPO)},
    "create_branch": {
        "required": ["owner", "repo", "branch"],
        "properties": {**_OWNER_REPO, "branch": {"type": "string"}, "from_branch": {"type": "string"}},
    },
    "create_or_update_file": {
        "required": ["owner", "repo", "path", "content", "message", "branch"],
        "properties": {
            **_OWNER_REPO,
            "path": {"type": "string"},
            "content": {"type": "string"},
            "message": {"type": "string"},
            "branch": {"type": "string"},
            "sha": {"type": "string"},
        },
    },
    "get_file_contents": {
        "required": ["owner", "repo", "path"],
        "properties": {**_OWNER_REPO, "path": {"type": "string"}, "branch": {"type": "string"}},
    },
    "delete_file": {
        "required": ["owner", "repo", "path", "message", "branch"],
        "properties": {
            **_OWNER_REPO,
            "path": {"type": "string"},
            "message": {"type": "string"},
            "branch": {"type": "string"},
        },
    },
    "list_commits": {"required": ["owner", "repo"], "properties": {**_OWNER_REPO, "sha": {"type": "string"}}},
    "get_commit": {"required": ["owner", "repo", "sha"], "properties": {**_OWNER_REPO, "sha": {"type": "string"}}},
    "list_tags": {"required": ["owner", "repo"], "properties": dict(_OWNER_REPO)},
    "get_tag": {"required": ["owner", "repo", "tag"], "properties": {**_OWNER_REPO, "tag": {"type": "string"}}},
    # issues
    "create_issue": {
        "required": ["owner", "repo", "title"],
        "properties": {**_OWNER_REPO, "title": {"type": "string"}, "body": {"type": "string"}},
    },
    "get_issue": {
        "required": ["owner", "repo", "issueNumber"],
        "properties": {**_OWNER_REPO, "issueNumber": {"type": "integer"}},
    },
    "update_issue": {
        "required": ["owner", "repo", "issueNumber"],
        "properties": {
            **_OWNER_REPO,
            "issueNumber": {"type": "integer"},
            "title": {"type": "string"},
            "body": {"type": "string"},
            "state": {"type": "string"},
        },
    },
    "add_issue_comment": {
        "required": ["owner", "repo", "issueNumber", "body"],
        "properties": {**_OWNER_REPO, "issueNumber": {"type": "integer"}, "body": {"type": "string"}},
    },
    "add_issue_labels": {
        "required": ["owner", "repo", "issueNumber", "labels"],
        "properties": {**_OWNER_REPO, "issueNumber": {"type": "integer"}, "labels": {"type": "array"}},
    },
    "add_issue_assignees": {
        "required": ["owner", "repo", "issueNumber", "assignees"],
        "properties": {**_OWNER_REPO, "issueNumber": {"type": "integer"}, "assignees": {"type": "array"}},
    },
    # pull requests
    "create_pull_request": {
        "required": ["owner", "repo", "title", "head", "base"],
        "properties": {
            **_OWNER_REPO,
            "title": {"type": "string"},
            "body": {"type": "string"},
            "head": {"type": "string"},
            "base": {"type": "string"},
        },
    },
    "get_pull_request": {
        "required": ["owner", "repo", "pullNumber"],
        "properties": {**_OWNER_REPO, "pullNumber": {"type": "integer"}},
    },
    "list_pull_requests": {
        "required": ["owner", "repo"],
        "properties": {**_OWNER_REPO, "state": {"type": "string"}},
    },
    "update_pull_request": {
        "required": ["owner", "repo", "pullNumber"],
        "properties": {
            **_OWNER_REPO,
            "pullNumber": {"type": "integer"},
            "title": {"type": "string"},
            "body": {"type": "string"},
            "state": {"type": "string"},
        },
    },
    "add_pull_request_comment": {
        "required": ["owner", "repo", "pullNumber", "body"],
        "properties": {**_OWNER_REPO, "pullNumber": {"type": "integer"}, "body": {"type": "string"}},
    },
    "create_pull_request_review": {
        "required": ["owner", "repo", "pullNumber", "event"],
        "properties": {
            **_OWNER_REPO,
            "pullNumber": {"type": "integer"},
            "event": {"type": "string"},
            "body": {"type": "string"},
        },
    },
    "get_pull_request_reviews": {
        "required": ["owner", "repo", "pullNumber"],
        "properties": {**_OWNER_REPO, "pullNumber": {"type": "integer"}},
    },
    "merge_pull_request": {
        "required": ["owner", "repo", "pullNumber"],
        "properties": {
            **_OWNER_REPO,
            "pullNumber": {"type": "integer"},
            "mergeMethod": {"type": "string", "enum": ["merge", "squash", "rebase"]},
            "commitTitle": {"type": "string"},
            "commitMessage": {"type": "string"},
        },
    },
}


@dataclass(frozen=True, slots=True)
class ToolCall:
    """A tool name plus its arguments. The arguments are copied on construction."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", copy.deepcopy(dict(self.arguments)))

    def as_request_arguments(self) -> dict[str, Any]:
        """Return a fresh mutable copy suitable for handing to the session."""
        return copy.deepcopy(dict(self.arguments))


def validate_tool_arguments(tool_name: str, arguments: Mapping[str, Any]) -> None:
    """Check builder output against the declared argument table.

    Enforces required keys, no undeclared keys, and basic JSON types. Values are not
    range-checked: negative-path tests deliberately send empty or out-of-range values.
    """
    if tool_name not in TOOL_ARGUMENTS:
        raise HarnessError(code="Arguments", message=f"No argument table for tool: {tool_name}", tool=tool_name)

    declared = TOOL_ARGUMENTS[tool_name]
    props: dict[str, Any] = declared.get("properties", {})
    required: list[str] = declared.get("required", [])

    for k in required:
        if k not in arguments:
            raise HarnessError(code="Arguments", message=f"Missing required field: {k}", tool=tool_name)

    extras = sorted(k for k in arguments if k not in props)
    if extras:
        raise HarnessError(
            code="Arguments",
            message=f"Undeclared fields for {tool_name}: {', '.join(extras)}",
            tool=tool_name,
        )

    for k, v in arguments.items():
        expected = props[k].get("type")
        if expected == "string" and not isinstance(v, str):
            raise HarnessError(code="Arguments", message=f"Field '{k}' must be a string", tool=tool_name)
        if expected == "integer" and (not isinstance(v, int) or isinstance(v, bool)):
            raise HarnessError(code="Arguments", message=f"Field '{k}' must be an integer", tool=tool_name)
        if expected == "boolean" and not isinstance(v, bool):
            raise HarnessError(code="Arguments", message=f"Field '{k}' must be a boolean", tool=tool_name)
        if expected == "array" and not isinstance(v, list):
            raise HarnessError(code="Arguments", message=f"Field '{k}' must be an array", tool=tool_name)
        allowed = props[k].get("enum")
        if allowed is not None and v not in allowed:
            raise HarnessError(code="Arguments", message=f"Field '{k}' must be one of {allowed}", tool=tool_name)


def _build(tool_name: str, **arguments: Any) -> ToolCall:
    args = {k: v for k, v in arguments.items() if v is not None}
    validate_tool_arguments(tool_name, args)
    return ToolCall(name=tool_name, arguments=args)


# context


def get_me() -> ToolCall:
    return _build("get_me")


def get_teams(user: str | None = None) -> ToolCall:
    return _build("get_teams", user=user)


def get_team_members(org: str, team_slug: str) -> ToolCall:
    return _build("get_team_members", org=org, team_slug=team_slug)


# repos


def create_repository(
    name: str, *, private: bool = True, auto_init: bool = True, description: str | None = None
) -> ToolCall:
    return _build("create_repository", name=name, private=private, autoInit=auto_init, description=description)


def get_repository(owner: str, repo: str) -> ToolCall:
    return _build("get_repository", owner=owner, repo=repo)


def list_repositories(user: str | None = None) -> ToolCall:
    return _build("list_repositories", user=user)


def search_repositories(query: str) -> ToolCall:
    return _build("search_repositories", query=query)


def list_branches(owner: str, repo: str) -> ToolCall:
    return _build("list_branches", owner=owner, repo=repo)


def create_branch(owner: str, repo: str, branch: str, from_branch: str | None = "main") -> ToolCall:
    return _build("create_branch", owner=owner, repo=repo, branch=branch, from_branch=from_branch)


def create_or_update_file(
    owner: str, repo: str, path: str, content: str, message: str, branch: str, sha: str | None = None
) -> ToolCall:
    return _build(
        "create_or_update_file",
        owner=owner,
        repo=repo,
        path=path,
        content=content,
        message=message,
        branch=branch,
        sha=sha,
    )


def get_file_contents(owner: str, repo: str, path: str, branch: str | None = None) -> ToolCall:
    return _build("get_file_contents", owner=owner, repo=repo, path=path, branch=branch)


def delete_file(owner: str, repo: str, path: str, message: str, branch: str) -> ToolCall:
    return _build("delete_file", owner=owner, repo=repo, path=path, message=message, branch=branch)


def list_commits(owner: str, repo: str, sha: str | None = None) -> ToolCall:
    return _build("list_commits", owner=owner, repo=repo, sha=sha)


def get_commit(owner: str, repo: str, sha: str) -> ToolCall:
    return _build("get_commit", owner=owner, repo=repo, sha=sha)


def list_tags(owner: str, repo: str) -> ToolCall:
    return _build("list_tags", owner=owner, repo=repo)


def get_tag(owner: str, repo: str, tag: str) -> ToolCall:
    return _build("get_tag", owner=owner, repo=repo, tag=tag)


# issues


def create_issue(owner: str, repo: str, title: str, body: str | None = None) -> ToolCall:
    return _build("create_issue", owner=owner, repo=repo, title=title, body=body)


def get_issue(owner: str, repo: str, issue_number: int) -> ToolCall:
    return _build("get_issue", owner=owner, repo=repo, issueNumber=issue_number)


def update_issue(
    owner: str,
    repo: str,
    issue_number: int,
    *,
    title: str | None = None,
    body: str | None = None,
    state: str | None = None,
) -> ToolCall:
    return _build("update_issue", owner=owner, repo=repo, issueNumber=issue_number, title=title, body=body, state=state)


def add_issue_comment(owner: str, repo: str, issue_number: int, body: str) -> ToolCall:
    return _build("add_issue_comment", owner=owner, repo=repo, issueNumber=issue_number, body=body)


def add_issue_labels(owner: str, repo: str, issue_number: int, labels: list[str]) -> ToolCall:
    return _build("add_issue_labels", owner=owner, repo=repo, issueNumber=issue_number, labels=list(labels))


def add_issue_assignees(owner: str, repo: str, issue_number: int, assignees: list[str]) -> ToolCall:
    return _build("add_issue_assignees", owner=owner, repo=repo, issueNumber=issue_number, assignees=list(assignees))


# pull requests


def create_pull_request(owner: str, repo: str, title: str, body: str | None, head: str, base: str) -> ToolCall:
    return _build("create_pull_request", owner=owner, repo=repo, title=title, body=body, head=head, base=base)


def get_pull_request(owner: str, repo: str, pull_number: int) -> ToolCall:
    return _build("get_pull_request", owner=owner, repo=repo, pullNumber=pull_number)


def list_pull_requests(owner: str, repo: str, state: str | None = None) -> ToolCall:
    return _build("list_pull_requests", owner=owner, repo=repo, state=state)


def update_pull_request(
    owner: str,
    repo: str,
    pull_number: int,
    *,
    title: str | None = None,
    body: str | None = None,
    state: str | None = None,
) -> ToolCall:
    return _build(
        "update_pull_request", owner=owner, repo=repo, pullNumber=pull_number, title=title, body=body, state=state
    )


def add_pull_request_comment(owner: str, repo: str, pull_number: int, body: str) -> ToolCall:
    return _build("add_pull_request_comment", owner=owner, repo=repo, pullNumber=pull_number, body=body)


def create_pull_request_review(
    owner: str, repo: str, pull_number: int, event: str, body: str | None = None
) -> ToolCall:
    return _build("create_pull_request_review", owner=owner, repo=repo, pullNumber=pull_number, event=event, body=body)


def get_pull_request_reviews(owner: str, repo: str, pull_number: int) -> ToolCall:
    return _build("get_pull_request_reviews", owner=owner, repo=repo, pullNumber=pull_number)


def merge_pull_request(
    owner: str,
    repo: str,
    pull_number: int,
    merge_method: str = "merge",
    *,
    commit_title: str | None = None,
    commit_message: str | None = None,
) -> ToolCall:
    return _build(
        "merge_pull_request",
        owner=owner,
        repo=repo,
        pullNumber=pull_number,
        mergeMethod=merge_method,
        commitTitle=commit_title,
        commitMessage=commit_message,
    )
