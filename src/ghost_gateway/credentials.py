"""Backend credential resolution and header injection."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from .models import CredentialPair, EffectiveCredentials

logger = logging.getLogger(__name__)


SERVICE_KEY_HEADER = "X-API-Key"
ADMIN_API_KEY_HEADER = "X-Ghost-Admin-Api-Key"
API_URL_HEADER = "X-Ghost-Api-Url"

ADMIN_API_KEY_PARAM = "ghost_admin_api_key"
API_URL_PARAM = "ghost_api_url"
OVERRIDE_PARAMS = (ADMIN_API_KEY_PARAM, API_URL_PARAM)


def split_override(params: Dict[str, Any]) -> Tuple[Dict[str, Any], CredentialPair]:
    """Separate the credential override parameters from the forwarded payload.

    Override values travel only as headers, so they are removed from the
    returned payload even when they are empty.
    """
    payload = {key: value for key, value in params.items() if key not in OVERRIDE_PARAMS}
    override = CredentialPair(
        admin_api_key=params.get(ADMIN_API_KEY_PARAM) or None,
        api_url=params.get(API_URL_PARAM) or None,
    )
    return payload, override


def resolve_credentials(
    override: Optional[CredentialPair],
    environment: Optional[CredentialPair],
    service_key: str,
) -> EffectiveCredentials:
    """Pick the credentials attached to one backend call.

    Each field is resolved on its own: call override first, then the process
    environment, otherwise omitted so the backend applies its default. The
    service key is always present.
    """
    override = override or CredentialPair()
    environment = environment or CredentialPair()

    admin_api_key = _first_set(override.admin_api_key, environment.admin_api_key)
    api_url = _first_set(override.api_url, environment.api_url)

    logger.debug(
        "Resolved credentials admin_api_key=%s api_url=%s",
        _source(override.admin_api_key, environment.admin_api_key),
        _source(override.api_url, environment.api_url),
    )
    return EffectiveCredentials(
        service_key=service_key,
        admin_api_key=admin_api_key,
        api_url=api_url,
    )


def build_headers(credentials: EffectiveCredentials) -> Dict[str, str]:
    headers: Dict[str, str] = {SERVICE_KEY_HEADER: credentials.service_key}
    if credentials.admin_api_key:
        headers[ADMIN_API_KEY_HEADER] = credentials.admin_api_key
    if credentials.api_url:
        headers[API_URL_HEADER] = credentials.api_url
    return headers


def _first_set(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


def _source(call_value: Optional[str], env_value: Optional[str]) -> str:
    if call_value:
        return "override"
    if env_value:
        return "environment"
    return "backend-default"
