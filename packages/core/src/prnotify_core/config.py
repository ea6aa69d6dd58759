import json
import os
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml

from prnotify_core.models import NotifyContext

# Checked in order. INPUT_GITHUB_TOKEN is the action's `github_token` input.
TOKEN_ENV_VARS = ("INPUT_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")

DEFAULT_CONFIG: dict = {
    "machine_users": [],  # human-operated automation accounts that never get mentioned
    "dry_run": False,
}


def parse_machine_users(raw: Union[str, list, None]) -> frozenset:
    """
    Parse a machine-user list given as a multi-line string or a list of lines.

    Lines are stripped; blank lines and lines starting with ``#`` are dropped.
    """
    if not raw:
        return frozenset()
    lines = raw.splitlines() if isinstance(raw, str) else [str(item) for item in raw]
    return frozenset(line.strip() for line in lines if line.strip() and not line.strip().startswith("#"))


def token_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Return the first non-empty token among TOKEN_ENV_VARS, or None."""
    environ = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def load_config(config_path: str = ".prnotify.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prnotify.yml in the current directory
      3. The ``machine_users`` action input (INPUT_MACHINE_USERS), added to the file's list
      4. CLI argument overrides

    The token is taken from the first of TOKEN_ENV_VARS that is set.
    """
    config = {**DEFAULT_CONFIG, "machine_users": list(DEFAULT_CONFIG["machine_users"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    machine_users = set(parse_machine_users(config.get("machine_users")))
    machine_users |= parse_machine_users(os.environ.get("INPUT_MACHINE_USERS"))

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value
        if cli_overrides.get("machine_users"):
            machine_users |= parse_machine_users(cli_overrides["machine_users"])

    config["machine_users"] = sorted(machine_users)
    config["github_token"] = token_from_env()

    return config


def load_event(environ: Mapping[str, str]) -> dict:
    """Load the webhook payload GitHub Actions writes to GITHUB_EVENT_PATH."""
    event_path = environ.get("GITHUB_EVENT_PATH")
    if not event_path or not Path(event_path).exists():
        return {}
    with open(event_path, encoding="utf-8") as f:
        return json.load(f) or {}


def build_context(config: dict, environ: Optional[Mapping[str, str]] = None, **overrides) -> NotifyContext:
    """
    Assemble the immutable NotifyContext for one run.

    Values come from the GitHub Actions environment and event payload; any
    override that is not None wins. Raises ValueError when the repository or
    pull request number cannot be determined.
    """
    environ = os.environ if environ is None else environ
    payload = load_event(environ)
    pull_request = payload.get("pull_request") or {}
    review = payload.get("review") or {}

    values = {
        "repo": environ.get("GITHUB_REPOSITORY", ""),
        "pr_number": pull_request.get("number") or 0,
        "event_name": environ.get("GITHUB_EVENT_NAME", ""),
        "event_action": payload.get("action") or "",
        "pr_merged": bool(pull_request.get("merged", False)),
        "review_state": review.get("state") or "",
        "actor": environ.get("GITHUB_ACTOR", ""),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    if "/" not in values["repo"]:
        raise ValueError("Repository must be given in owner/name format (or set GITHUB_REPOSITORY).")
    if not values["pr_number"]:
        raise ValueError("No pull request number found in the event payload; pass --pr.")

    return NotifyContext(machine_users=parse_machine_users(config.get("machine_users")), **values)
