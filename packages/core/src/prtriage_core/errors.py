"""Errors raised by the aggregation pipeline.

A PRTriageError aborts the run before a report is built. Partial extraction
problems never do: a malformed nitpick block yields fewer nitpicks, and a
failed alert lookup (AlertAccessDeniedError among them) keeps its comment.
"""

from __future__ import annotations


class PRTriageError(Exception):
    """Base class for every fatal prtriage error."""


class ReviewQueryError(PRTriageError):
    """The review-data query failed or GitHub returned GraphQL errors."""


class MalformedResponseError(PRTriageError):
    """The query response could not be parsed into the expected shape."""


class RepositoryNotFoundError(PRTriageError):
    def __init__(self, owner: str, repo: str):
        super().__init__(f"Repository {owner}/{repo} not found or not accessible.")
        self.owner = owner
        self.repo = repo


class PullRequestNotFoundError(PRTriageError):
    def __init__(self, pr_number: int):
        super().__init__(f"PR #{pr_number} not found or not accessible.")
        self.pr_number = pr_number


class AlertAccessDeniedError(Exception):
    """The token may not read code-scanning alerts. Caught by the reconciler."""

    def __init__(self, owner: str, repo: str, alert_number: int):
        super().__init__(
            f"Not allowed to read code-scanning alert #{alert_number} in {owner}/{repo}. "
            "The token needs the security_events scope (classic) or "
            "'Code scanning alerts: read' (fine-grained)."
        )
        self.owner = owner
        self.repo = repo
        self.alert_number = alert_number
