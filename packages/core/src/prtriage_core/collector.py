from __future__ import annotations

from typing import Iterable

from prtriage_core.models import Comment, ReviewThread, UnresolvedComment


def to_unresolved_comment(comment: Comment) -> UnresolvedComment:
    return UnresolvedComment(
        author=comment.author,
        body=comment.body,
        created_at=comment.created_at,
        file=comment.path,
        line=comment.effective_line,
    )


def collect_unresolved_comments(threads: Iterable[ReviewThread]) -> list[UnresolvedComment]:
    """Flatten every unresolved thread into its comments, in document order.

    No comment is dropped by author here; scanner noise is reconciled later.
    """
    return [to_unresolved_comment(c) for thread in threads if not thread.is_resolved for c in thread.comments]
