"""Report aggregation and the end-to-end pipeline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from prtriage_core.collector import collect_unresolved_comments
from prtriage_core.models import NitpickComment, PullRequest, Report, UnresolvedComment
from prtriage_core.nitpicks import extract_all_nitpick_comments
from prtriage_core.normalize import normalize_response
from prtriage_core.security import DEFAULT_SECURITY_AUTHOR, SecurityAlertReconciler

if TYPE_CHECKING:
    from prtriage_core.gh.client import GitHubClient

logger = logging.getLogger(__name__)


def build_report(
    pull_request: PullRequest,
    unresolved_comments: Iterable[UnresolvedComment],
    nitpick_comments: Iterable[NitpickComment],
) -> Report:
    unresolved = tuple(unresolved_comments)
    nitpicks = tuple(nitpick_comments)
    return Report(
        pr_number=pull_request.number,
        owner=pull_request.owner,
        repo=pull_request.repo,
        title=pull_request.title,
        url=pull_request.url,
        unresolved_comments=unresolved,
        nitpick_comments=nitpicks,
        total_unresolved=len(unresolved),
        total_nitpicks=len(nitpicks),
    )


def build_pr_report(
    client: GitHubClient,
    owner: str,
    repo: str,
    pr_number: int,
    security_author: str = DEFAULT_SECURITY_AUTHOR,
    max_workers: int = 1,
) -> Report:
    """Fetch review data for one PR and aggregate it into a Report.

    The query runs once, before any processing; if it fails the typed error
    propagates and nothing is extracted. Alert lookups happen afterwards and
    only affect which scanner comments are kept.
    """
    raw = client.fetch_review_data(owner, repo, pr_number)
    snapshot = normalize_response(raw, owner, repo, pr_number)

    reconciler = SecurityAlertReconciler(
        client.alert_state_lookup(owner, repo),
        security_author=security_author,
        max_workers=max_workers,
    )
    unresolved = reconciler.reconcile(collect_unresolved_comments(snapshot.threads))
    nitpicks = extract_all_nitpick_comments(snapshot.reviews)

    logger.debug("PR #%d: %d unresolved comment(s), %d nitpick(s)", pr_number, len(unresolved), len(nitpicks))
    return build_report(snapshot.pull_request, unresolved, nitpicks)
