"""GitHub API clients and utilities."""

from gh_year_report.github.auth import AuthenticationError, GitHubAuth
from gh_year_report.github.contributions import (
    UserNotFoundError,
    YearlyProfile,
    fetch_issue_count,
    fetch_yearly_profile,
    parse_contribution_calendar,
    parse_repository_contributions,
)
from gh_year_report.github.graphql import GraphQLClient, GraphQLError
from gh_year_report.github.http import (
    GitHubClient,
    GitHubHTTPError,
    GitHubResponse,
    HTTPRateLimitState,
    RateLimitExceeded,
    RateLimitInfo,
)

__all__ = [
    # Auth
    "AuthenticationError",
    "GitHubAuth",
    # HTTP Client
    "GitHubClient",
    "GitHubHTTPError",
    "GitHubResponse",
    # GraphQL Client
    "GraphQLClient",
    "GraphQLError",
    "HTTPRateLimitState",
    "RateLimitExceeded",
    "RateLimitInfo",
    # Contributions
    "UserNotFoundError",
    "YearlyProfile",
    "fetch_issue_count",
    "fetch_yearly_profile",
    "parse_contribution_calendar",
    "parse_repository_contributions",
]
