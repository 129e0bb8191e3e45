import logging
from urllib.parse import urlencode

import httpx

from hirevision.config import settings

logger = logging.getLogger(__name__)

WORKOS_API = "https://api.workos.com"
PROVIDERS = {"google": "GoogleOAuth", "microsoft": "MicrosoftOAuth", "github": "GitHubOAuth"}


class SSOError(Exception):
    pass


class SSONotConfigured(SSOError):
    pass


def is_configured() -> bool:
    return bool(settings.workos_api_key and settings.workos_client_id)


def authorization_url(provider: str, state: str) -> str:
    if not is_configured():
        raise SSONotConfigured("SSO is not configured")
    params = {
        "client_id": settings.workos_client_id,
        "redirect_uri": settings.workos_redirect_uri,
        "response_type": "code",
        "provider": PROVIDERS.get(provider, provider),
        "state": state,
    }
    return f"{WORKOS_API}/sso/authorize?{urlencode(params)}"


async def exchange_code(code: str) -> dict:
    """Exchange an authorization code for the signed-in user's profile.

    Returns ``{"id", "email", "first_name", "last_name", "organization_id"}``.
    """
    if not is_configured():
        raise SSONotConfigured("SSO is not configured")
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.post(
                f"{WORKOS_API}/sso/token",
                headers={"Authorization": f"Bearer {settings.workos_api_key}"},
                json={
                    "client_id": settings.workos_client_id,
                    "client_secret": settings.workos_api_key,
                    "grant_type": "authorization_code",
                    "code": code,
                },
            )
    except httpx.HTTPError as exc:
        logger.error("WorkOS token exchange failed: %s", exc)
        raise SSOError("SSO token exchange failed") from exc

    if response.status_code != 200:
        logger.error("WorkOS token exchange returned %s: %s", response.status_code, response.text[:200])
        raise SSOError("SSO token exchange failed")

    profile = response.json().get("profile") or {}
    if not profile.get("email"):
        raise SSOError("SSO response did not include a profile")
    return {
        "id": profile.get("id"),
        "email": profile["email"],
        "first_name": profile.get("first_name"),
        "last_name": profile.get("last_name"),
        "organization_id": profile.get("organization_id"),
    }
