"""GitHub GraphQL API client with pagination.

Async GraphQL client with cursor-based pagination and the queries used to
build a yearly report.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, cast

from gh_year_report.github.http import GitHubClient

logger = logging.getLogger(__name__)


class GraphQLError(Exception):
    """Raised when GraphQL query returns errors."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = [err.get("message", "Unknown error") for err in errors]
        super().__init__(f"GraphQL errors: {'; '.join(messages)}")


# Languages requested per repository in the profile query. Repositories with
# more languages are completed through REPOSITORY_LANGUAGES_QUERY.
PROFILE_LANGUAGES_PAGE = 10

YEARLY_PROFILE_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!, $languages: Int!) {
  user(login: $login) {
    login
    name
    bio
    avatarUrl
    followers {
      totalCount
    }
    following {
      totalCount
    }
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
            contributionLevel
          }
        }
      }
      commitContributionsByRepository(maxRepositories: 100) {
        contributions {
          totalCount
        }
        repository {
          nameWithOwner
          url
          description
          stargazerCount
          forkCount
          languages(first: $languages, orderBy: {field: SIZE, direction: DESC}) {
            pageInfo {
              hasNextPage
              endCursor
            }
            edges {
              size
              node {
                name
              }
            }
          }
        }
      }
    }
  }
  rateLimit {
    limit
    cost
    remaining
    resetAt
  }
}
"""

REPOSITORY_LANGUAGES_QUERY = """
query($owner: String!, $name: String!, $after: String, $first: Int = 100) {
  repository(owner: $owner, name: $name) {
    languages(first: $first, after: $after, orderBy: {field: SIZE, direction: DESC}) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        size
        node {
          name
        }
      }
    }
  }
}
"""

ISSUE_COUNT_QUERY = """
query($search: String!) {
  search(query: $search, type: ISSUE, first: 1) {
    issueCount
  }
}
"""


class GraphQLClient:
    """GitHub GraphQL API client with pagination.

    Features:
    - Execute arbitrary GraphQL queries
    - Cursor-based pagination with async iteration
    - Automatic error handling
    """

    GRAPHQL_ENDPOINT = "/graphql"

    def __init__(self, http_client: GitHubClient) -> None:
        self._http = http_client

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query.

        Args:
            query: GraphQL query string.
            variables: Optional query variables.

        Returns:
            GraphQL response data payload.

        Raises:
            GraphQLError: If the request fails or the response contains errors.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        response = await self._http.post(self.GRAPHQL_ENDPOINT, json=payload)

        if not response.is_success:
            logger.error(
                "GraphQL request failed: status=%d, response=%s",
                response.status_code,
                response.data,
            )
            raise GraphQLError([{"message": f"HTTP {response.status_code}"}])

        if not isinstance(response.data, dict):
            raise GraphQLError([{"message": "Invalid GraphQL response format"}])

        if response.data.get("errors"):
            errors = response.data["errors"]
            logger.error("GraphQL errors: %s", errors)
            raise GraphQLError(errors)

        data = response.data.get("data")
        if data is None:
            raise GraphQLError([{"message": "Missing data in GraphQL response"}])

        return cast("dict[str, Any]", data)

    async def paginate(
        self,
        query: str,
        variables: dict[str, Any],
        path_to_connection: list[str],
        page_size: int = 100,
    ) -> AsyncIterator[dict[str, Any]]:
        """Auto-paginate through a GraphQL connection.

        Args:
            query: GraphQL query with $after and $first variables.
            variables: Base variables (without after/first).
            path_to_connection: Path to connection object in response.
            page_size: Number of items per page.

        Yields:
            Individual edges from paginated results.
        """
        has_next_page = True
        after_cursor: str | None = None

        while has_next_page:
            page_vars = {**variables, "after": after_cursor, "first": page_size}
            data = await self.execute(query, page_vars)

            connection: dict[str, Any] = data
            for key in path_to_connection:
                connection = connection.get(key) or {}

            page_info = connection.get("pageInfo") or {}
            edges = connection.get("edges") or []

            for edge in edges:
                if edge:
                    yield edge

            has_next_page = bool(page_info.get("hasNextPage", False))
            after_cursor = page_info.get("endCursor")

            logger.debug(
                "Paginated %d items, hasNextPage=%s, cursor=%s",
                len(edges),
                has_next_page,
                after_cursor,
            )

    async def query_yearly_profile(
        self,
        username: str,
        since: str,
        until: str,
    ) -> dict[str, Any]:
        """Query a user's profile and contributions between two instants.

        Returns:
            Response data with ``user`` and ``rateLimit`` keys.
        """
        logger.debug("Querying yearly profile: %s (%s..%s)", username, since, until)

        return await self.execute(
            YEARLY_PROFILE_QUERY,
            {
                "login": username,
                "from": since,
                "to": until,
                "languages": PROFILE_LANGUAGES_PAGE,
            },
        )

    async def paginate_repository_languages(
        self,
        name_with_owner: str,
        page_size: int = 100,
    ) -> AsyncIterator[dict[str, Any]]:
        """Paginate through every language edge of a repository.

        Yields:
            Edges of the form ``{"size": int, "node": {"name": str}}``.
        """
        owner, _, name = name_with_owner.partition("/")
        logger.debug("Paginating languages: %s", name_with_owner)

        async for edge in self.paginate(
            REPOSITORY_LANGUAGES_QUERY,
            {"owner": owner, "name": name},
            ["repository", "languages"],
            page_size,
        ):
            yield edge

    async def query_issue_count(self, search: str) -> int:
        """Count issues matching a search query."""
        logger.debug("Querying issue count: %s", search)

        data = await self.execute(ISSUE_COUNT_QUERY, {"search": search})

        search_result = data.get("search") or {}
        return int(search_result.get("issueCount") or 0)
