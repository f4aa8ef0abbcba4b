"""GitHub OAuth provider wiring and caller identity extraction."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastmcp.server.auth import AccessToken
from fastmcp.server.auth.providers.github import GitHubProvider
from fastmcp.server.dependencies import get_access_token

from .config import Settings
from .models import CallerIdentity


logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """A tool request reached the gateway without an authenticated caller."""


def build_auth_provider(settings: Settings) -> Optional[GitHubProvider]:
    if not (settings.github_client_id and settings.github_client_secret):
        logger.warning("GitHub OAuth is not configured; callers need GATEWAY_LOCAL_USERNAME")
        return None
    return GitHubProvider(
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        base_url=settings.gateway_base_url,
    )


def caller_from_claims(claims: Dict[str, Any]) -> CallerIdentity:
    # "sub" is the numeric GitHub id; the allow-list holds logins.
    username = claims.get("login")
    if not username:
        raise AuthenticationRequired("Access token carries no GitHub login")
    return CallerIdentity(
        username=str(username),
        display_name=str(claims.get("name") or username),
    )


def caller_from_access_token(token: Optional[AccessToken]) -> CallerIdentity:
    if token is None:
        raise AuthenticationRequired("No access token on the current request")
    return caller_from_claims(token.claims or {})


def current_caller() -> CallerIdentity:
    return caller_from_access_token(get_access_token())
