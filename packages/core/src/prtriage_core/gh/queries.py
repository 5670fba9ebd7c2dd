"""GraphQL documents used against the GitHub API."""

# Pagination caps: 100 review threads, 10 comments per thread, 100 reviews.
# Enough for typical PRs; exceptionally active PRs are truncated, not rejected.
REVIEW_DATA_QUERY = """
query($owner: String!, $repo: String!, $pr: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $pr) {
      title
      url
      reviewThreads(first: 100) {
        nodes {
          isResolved
          comments(first: 10) {
            nodes {
              body
              path
              line
              originalLine
              author { login }
              createdAt
            }
          }
        }
      }
      reviews(first: 100) {
        nodes {
          body
          author { login }
          createdAt
        }
      }
    }
  }
}"""
