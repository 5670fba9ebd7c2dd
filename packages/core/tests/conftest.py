from __future__ import annotations

import pytest

from payloads import NITPICK_REVIEW_BODY, SCANNER_BODY_TEMPLATE, comment_node, graphql_payload, review_node, thread_node


@pytest.fixture
def nitpick_body():
    return NITPICK_REVIEW_BODY


@pytest.fixture
def scenario_payload():
    """2 unresolved threads (3 comments, one a scanner comment for fixed alert #7),
    1 resolved thread, and 1 review with 2 + 1 nitpicks."""
    return graphql_payload(
        threads=[
            thread_node(
                [
                    comment_node("Please handle None here.", path="src/a.py", line=3, login="alice"),
                    comment_node("Agreed, will fix.", path="src/a.py", line=3, login="bob"),
                ]
            ),
            thread_node(
                [
                    comment_node(
                        SCANNER_BODY_TEMPLATE.format(number=7),
                        path="src/log.py",
                        line=None,
                        original_line=21,
                        login="github-advanced-security",
                    )
                ]
            ),
            thread_node([comment_node("Typo", path="README.md", line=1, login="carol")], is_resolved=True),
        ],
        reviews=[review_node(NITPICK_REVIEW_BODY)],
    )
