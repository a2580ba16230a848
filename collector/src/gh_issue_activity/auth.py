"""GitHub authentication with a Personal Access Token."""

from github import Auth, Github, GithubException


class AuthenticationError(Exception):
    """Raised when GitHub authentication fails."""


def get_github_client_from_token(token: str) -> Github:
    """
    Create a GitHub client using a Personal Access Token.

    Args:
        token: GitHub Personal Access Token

    Returns:
        Authenticated Github client

    Raises:
        AuthenticationError: If authentication fails
    """
    auth = Auth.Token(token)
    client = Github(auth=auth)

    try:
        # Verify the token works by fetching the authenticated user
        client.get_user().login
    except GithubException as e:
        message = e.data.get("message", str(e)) if isinstance(e.data, dict) else str(e)
        raise AuthenticationError(f"Failed to authenticate with token: {message}") from e

    return client
