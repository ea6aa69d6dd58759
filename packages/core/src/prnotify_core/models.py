"""Data models for the notification pipeline.

The GraphQL payloads returned by GitHub are parsed into these types once, at
the I/O boundary, so the pipeline functions in prnotify_core.notifier only
ever see plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class GitHubUser:
    """A GitHub account as returned by the GraphQL ``Actor``/``User`` types."""

    login: str
    resource_path: str = ""

    @classmethod
    def from_node(cls, node: Optional[dict]) -> GitHubUser | None:
        # Unlinked commit emails and deleted accounts come back as null.
        if not node or not node.get("login"):
            return None
        return cls(login=node["login"], resource_path=node.get("resourcePath", ""))


# Assignees carry no data beyond the account itself.
AssigneeRecord = GitHubUser


@dataclass
class CommitRecord:
    """One PR commit: its committer plus every (co-)author GitHub could link."""

    committer: GitHubUser | None
    authors: list[GitHubUser | None] = field(default_factory=list)
    oid: str = ""

    @classmethod
    def from_node(cls, node: dict) -> CommitRecord:
        commit = node.get("commit") or {}
        committer = commit.get("committer") or {}
        authors = (commit.get("authors") or {}).get("nodes") or []
        return cls(
            committer=GitHubUser.from_node(committer.get("user")),
            authors=[GitHubUser.from_node((a or {}).get("user")) for a in authors],
            oid=commit.get("oid", ""),
        )


@dataclass
class ReviewRecord:
    state: str  # "APPROVED" | "CHANGES_REQUESTED" | "COMMENTED" | "DISMISSED" | "PENDING"
    author: GitHubUser | None
    commit_oid: str = ""

    @classmethod
    def from_node(cls, node: dict) -> ReviewRecord:
        return cls(
            state=node.get("state", ""),
            author=GitHubUser.from_node(node.get("author")),
            commit_oid=(node.get("commit") or {}).get("oid", ""),
        )


@dataclass(frozen=True)
class NotifyContext:
    """Everything one invocation needs to know about the triggering event.

    Built once by prnotify_core.config.build_context before any pipeline
    function runs and never mutated afterwards.
    """

    repo: str  # "owner/name"
    pr_number: int
    event_name: str  # "pull_request" | "pull_request_review" | ...
    event_action: str = ""
    pr_merged: bool = False
    review_state: str = ""  # lowercase, as in the webhook payload: "approved", "changes_requested", ...
    actor: str = ""
    machine_users: frozenset[str] = frozenset()


@dataclass
class Page:
    """One page of a GraphQL connection."""

    records: list = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None


@dataclass
class PullRequestData:
    commits: Page
    reviews: Page
    assignees: list[GitHubUser | None] = field(default_factory=list)
