"""Tests for the PyGithub-backed client."""

from unittest.mock import MagicMock

import pytest
import requests
from github import GithubException, RateLimitExceededException, UnknownObjectException

from prtriage_core.errors import (
    AlertAccessDeniedError,
    PullRequestNotFoundError,
    RepositoryNotFoundError,
    ReviewQueryError,
)
from prtriage_core.gh.client import GitHubClient
from prtriage_core.gh.queries import REVIEW_DATA_QUERY


def _client():
    gh = MagicMock()
    return GitHubClient(gh=gh), gh


class TestFetchReviewData:
    def test_runs_query_with_variables(self):
        client, gh = _client()
        gh.requester.graphql_query.return_value = ({}, {"data": {"repository": None}})

        data = client.fetch_review_data("acme", "widgets", 42)

        gh.requester.graphql_query.assert_called_once_with(
            REVIEW_DATA_QUERY, {"owner": "acme", "repo": "widgets", "pr": 42}
        )
        assert data == {"data": {"repository": None}}

    def test_github_error_becomes_review_query_error(self):
        client, gh = _client()
        gh.requester.graphql_query.side_effect = GithubException(502, {"message": "Bad Gateway"}, None)

        with pytest.raises(ReviewQueryError, match="GraphQL query failed"):
            client.fetch_review_data("acme", "widgets", 42)

    def test_network_error_becomes_review_query_error(self):
        client, gh = _client()
        gh.requester.graphql_query.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(ReviewQueryError):
            client.fetch_review_data("acme", "widgets", 42)

    def test_missing_pull_request_becomes_not_found(self):
        client, gh = _client()
        gh.requester.graphql_query.side_effect = UnknownObjectException(
            404,
            {
                "data": {"repository": {"pullRequest": None}},
                "errors": [{"type": "NOT_FOUND", "path": ["repository", "pullRequest"], "message": "Could not resolve"}],
            },
            None,
        )

        with pytest.raises(PullRequestNotFoundError, match="#42"):
            client.fetch_review_data("acme", "widgets", 42)

    def test_missing_repository_becomes_not_found(self):
        client, gh = _client()
        gh.requester.graphql_query.side_effect = UnknownObjectException(
            404,
            {
                "data": {"repository": None},
                "errors": [{"type": "NOT_FOUND", "path": ["repository"], "message": "Could not resolve"}],
            },
            None,
        )

        with pytest.raises(RepositoryNotFoundError, match="acme/widgets"):
            client.fetch_review_data("acme", "widgets", 42)

    def test_not_found_without_error_path_is_repository(self):
        client, gh = _client()
        gh.requester.graphql_query.side_effect = UnknownObjectException(404, {"message": "Not Found"}, None)

        with pytest.raises(RepositoryNotFoundError):
            client.fetch_review_data("acme", "widgets", 42)


class TestCodeScanningAlert:
    def test_reads_most_recent_instance_state(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.return_value = ({}, {"number": 7, "most_recent_instance": {"state": "fixed"}})

        alert = client.get_code_scanning_alert("acme", "widgets", 7)

        gh.requester.requestJsonAndCheck.assert_called_once_with("GET", "/repos/acme/widgets/code-scanning/alerts/7")
        assert alert.number == 7
        assert alert.is_fixed

    def test_missing_instance_has_no_state(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.return_value = ({}, {"number": 7})

        alert = client.get_code_scanning_alert("acme", "widgets", 7)

        assert alert.most_recent_state is None
        assert not alert.is_fixed

    def test_lookup_errors_propagate(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.side_effect = GithubException(500, {"message": "Server Error"}, None)

        with pytest.raises(GithubException):
            client.get_code_scanning_alert("acme", "widgets", 7)

    def test_forbidden_lookup_names_missing_scope(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.side_effect = GithubException(
            403, {"message": "Resource not accessible by integration"}, None
        )

        with pytest.raises(AlertAccessDeniedError, match="security_events"):
            client.get_code_scanning_alert("acme", "widgets", 7)

    def test_rate_limit_is_not_reported_as_missing_scope(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.side_effect = RateLimitExceededException(
            403, {"message": "API rate limit exceeded"}, None
        )

        with pytest.raises(RateLimitExceededException):
            client.get_code_scanning_alert("acme", "widgets", 7)

    def test_alert_state_lookup_is_bound_to_repo(self):
        client, gh = _client()
        gh.requester.requestJsonAndCheck.return_value = ({}, {"number": 3, "most_recent_instance": {"state": "open"}})

        lookup = client.alert_state_lookup("acme", "widgets")

        assert lookup(3) == "open"
        gh.requester.requestJsonAndCheck.assert_called_once_with("GET", "/repos/acme/widgets/code-scanning/alerts/3")


class TestFindPullNumber:
    def test_returns_first_open_pr_for_branch(self):
        client, gh = _client()
        gh.get_repo.return_value.get_pulls.return_value = [MagicMock(number=42)]

        assert client.find_pull_number("acme", "widgets", "feature/x") == 42
        gh.get_repo.assert_called_once_with("acme/widgets")
        gh.get_repo.return_value.get_pulls.assert_called_once_with(state="open", head="acme:feature/x")

    def test_returns_none_when_no_pr(self):
        client, gh = _client()
        gh.get_repo.return_value.get_pulls.return_value = []

        assert client.find_pull_number("acme", "widgets", "main") is None

    def test_returns_none_on_github_error(self):
        client, gh = _client()
        gh.get_repo.side_effect = GithubException(404, {"message": "Not Found"}, None)

        assert client.find_pull_number("acme", "widgets", "main") is None
