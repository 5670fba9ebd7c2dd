"""Typed review entities.

Every entity is built once from a single query snapshot and never mutated,
so all dataclasses are frozen and list-valued fields are tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DELETED_USER = "deleted-user"


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    url: str
    owner: str
    repo: str


@dataclass(frozen=True)
class Comment:
    """A single comment inside an inline review thread."""

    author: str
    body: str
    created_at: str
    path: str
    line: int | None = None
    original_line: int | None = None

    @property
    def effective_line(self) -> int | None:
        # line is None once the commented line drops out of the current diff
        return self.line if self.line is not None else self.original_line


@dataclass(frozen=True)
class ReviewThread:
    is_resolved: bool
    comments: tuple[Comment, ...] = ()


@dataclass(frozen=True)
class Review:
    """A top-level review submission. The body may embed nested markup."""

    author: str
    body: str
    created_at: str


@dataclass(frozen=True)
class PullRequestReviews:
    """Normalized result of the review-data query."""

    pull_request: PullRequest
    threads: tuple[ReviewThread, ...] = ()
    reviews: tuple[Review, ...] = ()


@dataclass(frozen=True)
class UnresolvedComment:
    author: str
    body: str
    created_at: str
    file: str
    line: int | None

    def to_dict(self) -> dict:
        return {
            "author": self.author,
            "body": self.body,
            "createdAt": self.created_at,
            "file": self.file,
            "line": self.line,
        }


@dataclass(frozen=True)
class NitpickComment:
    """A nitpick recovered from a review body.

    ``line`` is kept as the verbatim indicator string: ``"12"`` or ``"12-15"``.
    """

    author: str
    body: str
    created_at: str
    file: str
    line: str

    def to_dict(self) -> dict:
        return {
            "author": self.author,
            "body": self.body,
            "createdAt": self.created_at,
            "file": self.file,
            "line": self.line,
        }


@dataclass(frozen=True)
class CodeScanningAlert:
    number: int
    most_recent_state: str | None = None

    @property
    def is_fixed(self) -> bool:
        return self.most_recent_state == "fixed"


@dataclass(frozen=True)
class Report:
    """Final aggregated output for one pull request."""

    pr_number: int
    owner: str
    repo: str
    title: str
    url: str
    unresolved_comments: tuple[UnresolvedComment, ...] = field(default_factory=tuple)
    nitpick_comments: tuple[NitpickComment, ...] = field(default_factory=tuple)
    total_unresolved: int = 0
    total_nitpicks: int = 0

    def to_dict(self) -> dict:
        """Return the wire shape consumed by printers and downstream tools."""
        return {
            "owner": self.owner,
            "repo": self.repo,
            "prNumber": self.pr_number,
            "title": self.title,
            "url": self.url,
            "unresolvedComments": [c.to_dict() for c in self.unresolved_comments],
            "nitpickComments": [c.to_dict() for c in self.nitpick_comments],
            "totalUnresolvedComments": self.total_unresolved,
            "totalNitpicks": self.total_nitpicks,
        }
