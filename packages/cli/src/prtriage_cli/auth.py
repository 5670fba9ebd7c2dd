"""Where prtriage finds its GitHub token.

Checked in order, first hit wins:
  1. GITHUB_TOKEN, then GH_TOKEN (the variable the gh CLI itself reads)
  2. the token stored by `gh auth login`, read with `gh auth token`

Reading pull requests is enough for unresolved comments and nitpicks. Hiding
fixed scanner comments also needs code-scanning alerts to be readable
(security_events on classic tokens); without that the comments are kept and
each denied lookup is logged.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


def _token_from_env() -> str | None:
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name, "").strip()
        if token:
            logger.debug("Using GitHub token from %s.", name)
            return token
    return None


def _token_from_gh_cli() -> str | None:
    try:
        result = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=5)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI unavailable for token lookup: %s", e)
        return None

    if result.returncode != 0:
        logger.debug("`gh auth token` exited with %d: %s", result.returncode, (result.stderr or "").strip())
        return None

    token = result.stdout.strip()
    if token:
        logger.debug("Using GitHub token from the gh CLI session.")
    return token or None


def resolve_github_token() -> str | None:
    """Return a GitHub token, or None when no source has one."""
    return _token_from_env() or _token_from_gh_cli()
