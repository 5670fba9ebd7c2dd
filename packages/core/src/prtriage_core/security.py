"""Drop code-scanning comments whose underlying alert has already been fixed.

The scanner leaves its inline comments unresolved after the finding is fixed,
so unresolved threads fill up with noise. Each scanner comment links to its
alert; we look the alert up and hide the comment only when GitHub confirms the
most recent instance is "fixed".

Everything else fails open: no alert number in the body, a failed lookup, or
an unknown state all keep the comment.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from prtriage_core.models import UnresolvedComment

logger = logging.getLogger(__name__)

DEFAULT_SECURITY_AUTHOR = "github-advanced-security"

_ALERT_NUMBER_RE = re.compile(r"code-scanning/(\d+)")

# Given an alert number, return its most-recent-instance state ("open", "fixed", ...).
AlertStateLookup = Callable[[int], Optional[str]]


def extract_code_scanning_alert_number(body: str) -> int | None:
    """Return the alert number from a scanner comment body, or None."""
    match = _ALERT_NUMBER_RE.search(body or "")
    if not match:
        return None
    return int(match.group(1))


class SecurityAlertReconciler:
    """Filter unresolved comments against code-scanning alert state.

    ``lookup`` is called once per scanner comment that carries an alert number
    (no memoization). With ``max_workers > 1`` lookups run on a bounded thread
    pool; results are consumed in submission order so the output order never
    depends on which lookup finishes first.
    """

    def __init__(
        self,
        lookup: AlertStateLookup,
        security_author: str = DEFAULT_SECURITY_AUTHOR,
        max_workers: int = 1,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._lookup = lookup
        self.security_author = security_author
        self.max_workers = max_workers

    def reconcile(self, comments: Iterable[UnresolvedComment]) -> list[UnresolvedComment]:
        comments = list(comments)
        if self.max_workers == 1:
            keep = [self._should_keep(c) for c in comments]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="alert_lookup") as executor:
                keep = list(executor.map(self._should_keep, comments))

        kept = [c for c, k in zip(comments, keep) if k]
        dropped = len(comments) - len(kept)
        if dropped:
            logger.info("Hid %d comment(s) for code-scanning alerts already fixed.", dropped)
        return kept

    def _should_keep(self, comment: UnresolvedComment) -> bool:
        if comment.author != self.security_author:
            return True

        alert_number = extract_code_scanning_alert_number(comment.body)
        if alert_number is None:
            logger.debug("No alert number in %s comment on %s; keeping it.", self.security_author, comment.file)
            return True

        try:
            state = self._lookup(alert_number)
        except Exception as e:
            # Fail open: a lookup error must never hide a finding.
            logger.warning("Could not look up code-scanning alert #%d; keeping comment: %s", alert_number, e)
            return True

        logger.debug("Code-scanning alert #%d state: %s", alert_number, state)
        return state != "fixed"
