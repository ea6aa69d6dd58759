"""Options shared by every command that works on one pull request event."""

from __future__ import annotations

import click

from prnotify_core.models import NotifyContext


def event_options(func):
    """Attach the event options. Each defaults to the GitHub Actions environment."""
    options = [
        click.option("--repo", default=None, help="GitHub repository in owner/name format. [default: $GITHUB_REPOSITORY]"),
        click.option("--pr", "pr_number", type=int, default=None, help="Pull request number. [default: from event payload]"),
        click.option("--event", "event_name", default=None, help="Event name. [default: $GITHUB_EVENT_NAME]"),
        click.option("--action", "event_action", default=None, help="Event action, e.g. closed. [default: from payload]"),
        click.option("--merged/--not-merged", "pr_merged", default=None, help="Whether the PR was merged."),
        click.option("--review-state", default=None, help="Submitted review state, e.g. approved."),
        click.option("--actor", default=None, help="User who triggered the event. [default: $GITHUB_ACTOR]"),
        click.option(
            "--machine-user",
            "machine_users",
            multiple=True,
            help="Account never to mention. Repeatable; added to machine_users from the config file.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def load_run(
    ctx: click.Context,
    machine_users: tuple[str, ...],
    dry_run: bool | None = None,
    **event,
) -> tuple[dict, NotifyContext, str]:
    """Resolve config, event context and token, turning problems into usage errors."""
    from prnotify_core.config import build_context, load_config
    from prnotify_cli.auth import resolve_github_token

    config_path = ctx.obj.get("config_path", ".prnotify.yml") if ctx.obj else ".prnotify.yml"
    config = load_config(config_path, cli_overrides={"machine_users": list(machine_users), "dry_run": dry_run or None})

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Pass the github_token input, set GITHUB_TOKEN, or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    try:
        context = build_context(config, **event)
    except ValueError as e:
        raise click.UsageError(str(e))

    return config, context, token
