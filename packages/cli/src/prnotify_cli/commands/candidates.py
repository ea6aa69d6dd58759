"""candidates command: show who a notify run would mention, without posting."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from prnotify_cli.commands.options import event_options, load_run
from prnotify_core.gh.pull_request import get_github
from prnotify_core.notifier import exclusion_reason, gather_candidates

console = Console()


@click.command("candidates")
@event_options
@click.pass_context
def candidates_cmd(ctx, machine_users: tuple[str, ...], **event):
    """List every user attached to the PR and whether they would be mentioned."""
    _, context, token = load_run(ctx, machine_users, **event)

    try:
        candidates = gather_candidates(context, get_github(token))
    except GithubException as e:
        raise click.ClickException(f"GitHub API error ({e.status}): {e.data}")
    except ValueError as e:
        raise click.ClickException(str(e))

    if not candidates:
        console.print("[yellow]No users are attached to this pull request.[/yellow]")
        return

    table = Table(title=f"Candidates for {context.repo}#{context.pr_number}", show_header=True, header_style="bold cyan")
    table.add_column("User", style="bold")
    table.add_column("Decision")

    for login in candidates:
        reason = exclusion_reason(login, context.actor, context.machine_users)
        decision = "[green]notify[/green]" if reason is None else f"[dim]skip ({reason})[/dim]"
        table.add_row(escape(login), decision)

    console.print(table)
