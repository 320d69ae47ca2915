"""GitHub authentication module.

Loads and validates the GitHub token used for GraphQL queries. Reading
private contributions requires a token with the matching scopes.
"""

import logging
import os
import re
import subprocess

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_ENV = "GH_STATS_TOKEN"
FALLBACK_TOKEN_ENV = "GITHUB_TOKEN"


class AuthenticationError(Exception):
    """Raised when authentication fails or token is invalid."""


def _get_gh_cli_token() -> str | None:
    """Try to get token from GitHub CLI.

    Returns:
        Token from `gh auth token` or None if not available.
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
        if result.returncode == 0:
            token = result.stdout.strip()
            if token:
                logger.info("Using GitHub token from gh CLI")
                return token
        else:
            logger.debug(
                "gh CLI returned non-zero exit code (%d). "
                "Ensure you are authenticated with 'gh auth login'",
                result.returncode,
            )
    except FileNotFoundError:
        logger.debug("gh CLI not found, skipping")
    except subprocess.TimeoutExpired:
        logger.debug("gh CLI command timed out after 5 seconds")
    return None


class GitHubAuth:
    """GitHub authentication manager.

    Loads tokens from, in order:
    1. Explicit token parameter
    2. The configured environment variable (GH_STATS_TOKEN by default)
    3. GITHUB_TOKEN environment variable
    4. GitHub CLI (`gh auth token`)
    """

    VALID_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "github_pat_")

    CLASSIC_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{40}$")

    def __init__(self, token: str | None = None, token_env: str = DEFAULT_TOKEN_ENV) -> None:
        """Initialize GitHub authentication.

        Args:
            token: GitHub token. If None, loads from the environment or gh CLI.
            token_env: Name of the environment variable checked first.

        Raises:
            AuthenticationError: If token is missing or invalid.
        """
        loaded_token = None
        token_source = None

        if token:
            loaded_token = token
            token_source = "explicit parameter"
        else:
            for env_name in dict.fromkeys((token_env, FALLBACK_TOKEN_ENV)):
                if os.environ.get(env_name):
                    loaded_token = os.environ[env_name]
                    token_source = f"{env_name} environment variable"
                    break
            else:
                loaded_token = _get_gh_cli_token()
                if loaded_token:
                    token_source = "gh CLI"

        if not loaded_token:
            raise AuthenticationError(
                f"GitHub token not found. Set {token_env}, pass a token explicitly, "
                "or authenticate with `gh auth login`."
            )

        if token_source and token_source != "gh CLI":
            logger.info("Using GitHub token from %s", token_source)

        self._token: str = loaded_token
        self._validate_token()

    def _validate_token(self) -> None:
        """Validate token format.

        Raises:
            AuthenticationError: If token format is invalid.
        """
        token = self._token
        has_valid_prefix = any(token.startswith(prefix) for prefix in self.VALID_PREFIXES)
        is_classic = bool(self.CLASSIC_TOKEN_PATTERN.match(token))

        if not has_valid_prefix and not is_classic:
            raise AuthenticationError(
                f"Invalid token format. Expected prefix {self.VALID_PREFIXES} "
                "or 40-character hex string (classic token)"
            )

        if has_valid_prefix and len(token) < 20:
            raise AuthenticationError("Token appears too short to be valid")

    @property
    def token(self) -> str:
        return self._token

    def get_authorization_header(self) -> dict[str, str]:
        """Get the Authorization header for API requests."""
        return {"Authorization": f"bearer {self._token}"}
