"""Find the GitHub token for a prnotify run.

Inside a workflow the token arrives as the action's ``github_token`` input
or as the job's GITHUB_TOKEN; see prnotify_core.config.TOKEN_ENV_VARS for
the order. Outside Actions the GitHub CLI session is used as a last resort.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Mapping, Optional

from prnotify_core.config import token_from_env

logger = logging.getLogger(__name__)

GH_TOKEN_COMMAND = ("gh", "auth", "token")


def _gh_session_token() -> str | None:
    try:
        result = subprocess.run(list(GH_TOKEN_COMMAND), capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("No GitHub CLI session available: %s", e)
        return None
    token = result.stdout.strip() if result.returncode == 0 else ""
    return token or None


def resolve_github_token(environ: Optional[Mapping[str, str]] = None) -> str | None:
    """Return a token from the environment, then from `gh auth token`, else None.

    Never raises; callers turn None into a UsageError.
    """
    token = token_from_env(environ)
    if token:
        return token

    token = _gh_session_token()
    if token:
        logger.debug("Using the GitHub CLI session token.")
    return token
