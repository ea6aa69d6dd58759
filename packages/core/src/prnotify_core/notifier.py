"""Decide who to mention on a bot-authored pull request, and mention them.

Bot-authored PRs never reach the humans who care about them through the
usual notification paths, so this module gathers everyone attached to the PR,
drops the noise and posts a single comment mentioning the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from github import Github
from rich.console import Console

from prnotify_core.gh.pull_request import collect_pages, fetch_pull_request, list_commits, list_reviews, post_comment
from prnotify_core.models import AssigneeRecord, CommitRecord, NotifyContext, ReviewRecord

console = Console()
logger = logging.getLogger(__name__)

BOT_MARKER = "[bot]"


@dataclass
class NotifySummary:
    """What run_notify did, for the CLI to report."""

    repo: str
    pr_number: int
    candidates: list[str] = field(default_factory=list)
    users: list[str] = field(default_factory=list)
    comment: str | None = None
    comment_url: str | None = None
    posted: bool = False


def collect_users_to_notify(
    context: NotifyContext,
    commits: Iterable[CommitRecord],
    reviews: Iterable[ReviewRecord],
    assignees: Iterable[AssigneeRecord | None],
) -> dict[str, None]:
    """Return every login attached to the PR, in first-seen order.

    A dict is used as an insertion-ordered set so the mention order in the
    final comment is deterministic.
    """
    users: dict[str, None] = {}

    for commit in commits:
        if commit.committer:
            users[commit.committer.login] = None
        for author in commit.authors:
            if author:
                users[author.login] = None

    # Approvers are only worth a mention once the PR is closed. On a review
    # event the review itself is the news.
    if context.event_name == "pull_request" and context.event_action == "closed":
        for review in reviews:
            if review.state == "APPROVED" and review.author:
                users[review.author.login] = None

    for assignee in assignees:
        if assignee:
            users[assignee.login] = None

    return users


def exclusion_reason(login: str, actor: str, machine_users: frozenset[str] | set[str]) -> str | None:
    """Return why ``login`` must not be mentioned, or None if it should be."""
    if login == actor:
        return "actor"
    if BOT_MARKER in login:
        return "bot"
    if login in machine_users:
        return "machine user"
    return None


def filter_users(users: Iterable[str], actor: str, machine_users: frozenset[str] | set[str]) -> list[str]:
    return [login for login in users if exclusion_reason(login, actor, machine_users) is None]


_REVIEW_SENTENCES = {
    "approved": "The pull request was approved.",
    "changes_requested": "Changes were requested.",
    "commented": "A comment was left on the pull request.",
}


def _describe_event(context: NotifyContext) -> str:
    if context.event_name == "pull_request":
        # Merging closes the PR too, so the merge check must come first.
        if context.pr_merged:
            return "Merged the pull request."
        if context.event_action == "closed":
            return "Closed the pull request."
        return f"Pull request {context.event_action}."
    if context.event_name == "pull_request_review":
        return _REVIEW_SENTENCES.get(context.review_state, "A review was submitted.")
    return f"Event: {context.event_name}/{context.event_action}."


def format_comment(users: list[str], context: NotifyContext) -> str:
    """Render the mention comment. Callers must not pass an empty ``users``."""
    mentions = " ".join(f"@{login}" for login in users)
    return f"{mentions} {_describe_event(context)}"


def gather_candidates(context: NotifyContext, gh: Github) -> dict[str, None]:
    """Fetch the PR, drain every page of commits and reviews, and collect candidates."""
    pr = fetch_pull_request(gh, context.repo, context.pr_number)
    commits = collect_pages(pr.commits, lambda cursor: list_commits(gh, context.repo, context.pr_number, cursor))
    reviews = collect_pages(pr.reviews, lambda cursor: list_reviews(gh, context.repo, context.pr_number, cursor))
    logger.debug(
        "PR #%d: %d commit(s), %d review(s), %d assignee(s)",
        context.pr_number,
        len(commits),
        len(reviews),
        len(pr.assignees),
    )
    return collect_users_to_notify(context, commits, reviews, pr.assignees)


def run_notify(context: NotifyContext, gh: Github, dry_run: bool = False) -> NotifySummary:
    """Run the full pipeline for one event and post the mention comment.

    Nothing is posted when no one is left after filtering. In dry-run mode
    the comment is printed instead of posted. GitHub errors propagate.
    """
    candidates = gather_candidates(context, gh)
    users = filter_users(candidates, context.actor, context.machine_users)
    summary = NotifySummary(
        repo=context.repo,
        pr_number=context.pr_number,
        candidates=list(candidates),
        users=users,
    )

    if not users:
        logger.info("No users to notify after filtering")
        console.print("[yellow]No users to notify after filtering.[/yellow]")
        return summary

    summary.comment = format_comment(users, context)

    if dry_run:
        console.print("[bold]Dry run, comment not posted:[/bold]")
        console.print(summary.comment, markup=False)
        return summary

    result = post_comment(gh, context.repo, context.pr_number, summary.comment)
    summary.comment_url = result.html_url
    summary.posted = True
    logger.info("Comment posted: %s", result.html_url)
    console.print(f"[green]Comment posted: {result.html_url}[/green]")
    return summary
