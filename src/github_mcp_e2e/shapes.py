"""Response shapes for decode_json.

Only the fields the scenarios assert on are declared; everything else in the
provider's payload is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Shape(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(_Shape):
    login: str
    id: int = 0
    type: str = ""


class OwnerRef(_Shape):
    login: str


class Repository(_Shape):
    name: str
    full_name: str = ""
    description: str | None = None
    private: bool = False
    default_branch: str = ""
    owner: OwnerRef | None = None


class RepositorySearch(_Shape):
    total_count: int
    items: list[Repository] = Field(default_factory=list)


class ShaRef(_Shape):
    sha: str


class Branch(_Shape):
    name: str
    commit: ShaRef | None = None


class FileCommit(_Shape):
    """Result of create_or_update_file / delete_file."""

    commit: ShaRef


class CommitMessage(_Shape):
    message: str


class Commit(_Shape):
    sha: str
    commit: CommitMessage


class ChangedFile(_Shape):
    filename: str


class CommitDetail(Commit):
    files: list[ChangedFile] = Field(default_factory=list)


class Tag(_Shape):
    name: str
    commit: ShaRef


class NumberRef(_Shape):
    """Any resource identified by a number (issue, pull request)."""

    number: int


class Issue(_Shape):
    number: int
    title: str = ""
    state: str = ""
    body: str | None = None


class PullRequestBranch(_Shape):
    ref: str


class PullRequest(_Shape):
    number: int
    title: str = ""
    state: str = ""
    body: str | None = None
    head: PullRequestBranch | None = None
    base: PullRequestBranch | None = None


class Review(_Shape):
    id: int = 0
    state: str = ""
    body: str | None = None
    user: OwnerRef | None = None


class MergeResult(_Shape):
    merged: bool
    sha: str = ""


class Organization(_Shape):
    login: str = ""


class Team(_Shape):
    name: str
    slug: str
    organization: Organization | None = None


class TeamMember(_Shape):
    login: str
