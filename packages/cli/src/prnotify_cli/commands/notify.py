"""notify command: mention the humans attached to a bot-authored pull request."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from prnotify_cli.commands.options import event_options, load_run
from prnotify_core.gh.pull_request import get_github
from prnotify_core.notifier import run_notify

console = Console()


@click.command("notify")
@event_options
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    default=None,
    help="Print the comment instead of posting it.",
)
@click.pass_context
def notify_cmd(ctx, machine_users: tuple[str, ...], dry_run: bool | None, **event):
    """Post one comment mentioning committers, co-authors, assignees and,
    once the PR is closed, approvers.

    The actor, [bot] accounts and configured machine users are never
    mentioned. Nothing is posted when nobody is left.

    \b
    Inside GitHub Actions every event option is read from the environment:
      GITHUB_REPOSITORY, GITHUB_EVENT_NAME, GITHUB_ACTOR, GITHUB_EVENT_PATH
    """
    config, context, token = load_run(ctx, machine_users, dry_run=dry_run, **event)

    try:
        summary = run_notify(context, get_github(token), dry_run=bool(config.get("dry_run")))
    except GithubException as e:
        raise click.ClickException(f"GitHub API error ({e.status}): {e.data}")
    except ValueError as e:
        raise click.ClickException(str(e))

    if summary.users:
        verb = "Mentioned" if summary.posted else "Would mention"
        console.print(
            f"{verb} {len(summary.users)} of {len(summary.candidates)} candidate(s) on {summary.repo}#{summary.pr_number}."
        )
