from __future__ import annotations

import logging

import requests
from github import Github, GithubException, RateLimitExceededException, UnknownObjectException

from prtriage_core.errors import (
    AlertAccessDeniedError,
    PRTriageError,
    PullRequestNotFoundError,
    RepositoryNotFoundError,
    ReviewQueryError,
)
from prtriage_core.gh.queries import REVIEW_DATA_QUERY
from prtriage_core.models import CodeScanningAlert
from prtriage_core.security import AlertStateLookup

logger = logging.getLogger(__name__)


class GitHubClient:
    """The two GitHub calls the pipeline needs, on top of PyGithub.

    ``fetch_review_data`` is the single up-front query; its failures are fatal.
    ``get_code_scanning_alert`` is the per-comment lookup; its failures are left
    to the caller, which fails open.
    """

    def __init__(self, token: str | None = None, timeout: int = 30, gh: Github | None = None):
        self._gh = gh if gh is not None else Github(token, timeout=timeout)

    def fetch_review_data(self, owner: str, repo: str, pr_number: int) -> dict:
        """Run the review-data GraphQL query and return the raw response body."""
        variables = {"owner": owner, "repo": repo, "pr": pr_number}
        try:
            _, data = self._gh.requester.graphql_query(REVIEW_DATA_QUERY, variables)
        except UnknownObjectException as e:
            raise _not_found_error(e, owner, repo, pr_number) from e
        except (GithubException, requests.RequestException) as e:
            raise ReviewQueryError(f"GraphQL query failed: {e}") from e
        logger.debug("Fetched review data for %s/%s#%d", owner, repo, pr_number)
        return data

    def get_code_scanning_alert(self, owner: str, repo: str, alert_number: int) -> CodeScanningAlert:
        try:
            _, data = self._gh.requester.requestJsonAndCheck(
                "GET", f"/repos/{owner}/{repo}/code-scanning/alerts/{alert_number}"
            )
        except GithubException as e:
            if e.status == 403 and not isinstance(e, RateLimitExceededException):
                raise AlertAccessDeniedError(owner, repo, alert_number) from e
            raise
        instance = data.get("most_recent_instance") or {}
        return CodeScanningAlert(number=data.get("number", alert_number), most_recent_state=instance.get("state"))

    def alert_state_lookup(self, owner: str, repo: str) -> AlertStateLookup:
        """Bind the alert lookup to one repository for SecurityAlertReconciler."""

        def lookup(alert_number: int) -> str | None:
            return self.get_code_scanning_alert(owner, repo, alert_number).most_recent_state

        return lookup

    def find_pull_number(self, owner: str, repo: str, branch: str) -> int | None:
        """Return the number of the open PR whose head is ``branch``, or None."""
        try:
            pulls = self._gh.get_repo(f"{owner}/{repo}").get_pulls(state="open", head=f"{owner}:{branch}")
            for pr in pulls:
                return pr.number
        except GithubException as e:
            logger.debug("Could not list pull requests for %s/%s: %s", owner, repo, e)
        return None


def _not_found_error(e: UnknownObjectException, owner: str, repo: str, pr_number: int) -> PRTriageError:
    """Map a GraphQL NOT_FOUND to the object GitHub could not resolve."""
    errors = e.data.get("errors") if isinstance(e.data, dict) else None
    first = errors[0] if isinstance(errors, list) and errors else None
    path = first.get("path") if isinstance(first, dict) else None
    if path and "pullRequest" in path:
        return PullRequestNotFoundError(pr_number)
    return RepositoryNotFoundError(owner, repo)
