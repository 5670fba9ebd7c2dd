"""Map the raw review-data query response onto typed entities."""

from __future__ import annotations

import json
import logging

from prtriage_core.errors import (
    MalformedResponseError,
    PullRequestNotFoundError,
    RepositoryNotFoundError,
    ReviewQueryError,
)
from prtriage_core.models import DELETED_USER, Comment, PullRequest, PullRequestReviews, Review, ReviewThread

logger = logging.getLogger(__name__)


def _author_login(node: dict) -> str:
    """Return the author login, or the placeholder for deleted accounts (author: null)."""
    author = node.get("author")
    if not author or not author.get("login"):
        return DELETED_USER
    return author["login"]


def _nodes(connection: dict | None, what: str) -> list[dict]:
    if not isinstance(connection, dict) or not isinstance(connection.get("nodes"), list):
        raise MalformedResponseError(f"Expected a connection with a 'nodes' list for {what}.")
    return connection["nodes"]


def _to_comment(node: dict) -> Comment:
    return Comment(
        author=_author_login(node),
        body=node["body"] or "",
        created_at=node["createdAt"],
        path=node["path"],
        line=node.get("line"),
        original_line=node.get("originalLine"),
    )


def _to_thread(node: dict) -> ReviewThread:
    return ReviewThread(
        is_resolved=bool(node["isResolved"]),
        comments=tuple(_to_comment(c) for c in _nodes(node.get("comments"), "thread comments")),
    )


def _to_review(node: dict) -> Review:
    return Review(
        author=_author_login(node),
        body=node.get("body") or "",
        created_at=node["createdAt"],
    )


def normalize_response(raw: dict | str, owner: str, repo: str, pr_number: int) -> PullRequestReviews:
    """Normalize a review-data query response.

    ``raw`` may be the decoded JSON object or the undecoded response text.

    Raises:
        MalformedResponseError: the response is not JSON or not the expected shape.
        ReviewQueryError: GitHub reported GraphQL errors.
        RepositoryNotFoundError / PullRequestNotFoundError: the lookup returned null.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            preview = raw[:200] if isinstance(raw, str) else raw[:200].decode("utf-8", errors="replace")
            raise MalformedResponseError(f"Failed to parse GraphQL response: {preview}") from e

    if not isinstance(raw, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(raw).__name__}.")

    errors = raw.get("errors")
    if errors:
        first = errors[0] if isinstance(errors, list) and errors else errors
        message = first.get("message", first) if isinstance(first, dict) else first
        raise ReviewQueryError(f"GraphQL query failed: {message}")

    data = raw.get("data")
    if not isinstance(data, dict) or "repository" not in data:
        raise MalformedResponseError("GraphQL response has no 'data.repository' field.")

    repository = data["repository"]
    if repository is None:
        raise RepositoryNotFoundError(owner, repo)
    if not isinstance(repository, dict):
        raise MalformedResponseError(f"Expected 'repository' to be an object, got {type(repository).__name__}.")

    pr = repository.get("pullRequest")
    if pr is None:
        raise PullRequestNotFoundError(pr_number)
    if not isinstance(pr, dict):
        raise MalformedResponseError(f"Expected 'pullRequest' to be an object, got {type(pr).__name__}.")

    try:
        threads = tuple(_to_thread(t) for t in _nodes(pr.get("reviewThreads"), "reviewThreads"))
        reviews = tuple(_to_review(r) for r in _nodes(pr.get("reviews"), "reviews"))
        pull_request = PullRequest(
            number=pr_number,
            title=pr["title"],
            url=pr["url"],
            owner=owner,
            repo=repo,
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise MalformedResponseError(f"Unexpected GraphQL response shape: {e!r}") from e

    logger.debug(
        "Normalized PR #%d: %d thread(s), %d review(s)",
        pr_number,
        len(threads),
        len(reviews),
    )
    return PullRequestReviews(pull_request=pull_request, threads=threads, reviews=reviews)
