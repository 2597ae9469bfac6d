"""
OAuth 2.0 provider capabilities.

Each supported provider is a small class exposing the same capability set:

- authorization_url(state): where to send the user agent
- exchange_code(code): authorization code -> access token
- fetch_profile(access_token): -> FederatedProfile
- fetch_primary_email(access_token): -> primary email, or None when the
  provider has no separate email endpoint

`PROVIDERS` is a static mapping from provider name to class, selected at request
time by `get_provider`. Client credentials come from Settings; nothing is
registered globally at startup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, List, Mapping, Optional
from urllib.parse import urlencode

import httpx

from domain.errors import OAuthProviderError
from domain.principal import OAuthProvider
from services.settings import OAuthClientConfig, Settings

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class FederatedProfile:
    """The provider-independent view of an external identity."""

    provider: OAuthProvider
    subject: str
    display_name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class OAuthProviderClient:
    """
    Base class for a provider's capability set.

    Args:
        config: Client id/secret/callback registered with the provider
        http_client: Optional httpx.Client (tests pass one with a MockTransport)
    """

    provider: ClassVar[OAuthProvider]
    AUTHORIZE_URL: ClassVar[str]
    TOKEN_URL: ClassVar[str]
    PROFILE_URL: ClassVar[str]
    EMAILS_URL: ClassVar[Optional[str]] = None
    SCOPES: ClassVar[List[str]] = []

    def __init__(self, config: OAuthClientConfig, http_client: Optional[httpx.Client] = None) -> None:
        if not config.is_configured:
            raise OAuthProviderError(
                f"{self.provider.value} OAuth is not configured. Set "
                f"{self.provider.value.upper()}_CLIENT_ID and "
                f"{self.provider.value.upper()}_CLIENT_SECRET."
            )
        self.config = config
        self._http = http_client

    # -- capability set -------------------------------------------------

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.callback_url,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token."""
        if not code:
            raise OAuthProviderError("Missing authorization code")

        data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.config.callback_url,
        }
        token_data = self._request(
            "POST",
            self.TOKEN_URL,
            data=data,
            headers={"Accept": "application/json"},
        )
        if not isinstance(token_data, Mapping) or token_data.get("error"):
            detail = token_data.get("error_description") if isinstance(token_data, Mapping) else None
            raise OAuthProviderError(f"Token exchange failed: {detail or token_data}")
        access_token = token_data.get("access_token")
        if not access_token:
            raise OAuthProviderError("Token exchange failed: no access_token in response")
        return str(access_token)

    def fetch_profile(self, access_token: str) -> FederatedProfile:
        raise NotImplementedError

    def fetch_primary_email(self, access_token: str) -> Optional[str]:
        """
        Return the email flagged primary by the provider's email endpoint.

        Providers without such an endpoint return None.
        """
        if self.EMAILS_URL is None:
            return None
        entries = self._request("GET", self.EMAILS_URL, headers=self._auth_headers(access_token))
        if not isinstance(entries, list):
            raise OAuthProviderError("Unexpected email list from provider")
        for entry in entries:
            if isinstance(entry, Mapping) and entry.get("primary") and entry.get("email"):
                return str(entry["email"])
        return None

    # -- transport ------------------------------------------------------

    def _auth_headers(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            if self._http is not None:
                response = self._http.request(method, url, **kwargs)
            else:
                with httpx.Client(timeout=HTTP_TIMEOUT_SECONDS) as http:
                    response = http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s request to %s failed: %s", self.provider.value, url, e)
            raise OAuthProviderError(f"{self.provider.value} request failed: {e}") from e

        if response.status_code >= 400:
            logger.error(
                "%s returned %s for %s", self.provider.value, response.status_code, url
            )
            raise OAuthProviderError(
                f"{self.provider.value} returned HTTP {response.status_code}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise OAuthProviderError(f"{self.provider.value} returned invalid JSON") from e


class GoogleProvider(OAuthProviderClient):
    """Google OAuth 2.0 / OpenID Connect."""

    provider = OAuthProvider.GOOGLE
    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    PROFILE_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ["openid", "email", "profile"]

    def fetch_profile(self, access_token: str) -> FederatedProfile:
        data = self._request("GET", self.PROFILE_URL, headers=self._auth_headers(access_token))
        if not isinstance(data, Mapping) or not data.get("sub"):
            raise OAuthProviderError("Unexpected profile from google")
        return FederatedProfile(
            provider=self.provider,
            subject=str(data["sub"]),
            display_name=data.get("name"),
            username=data.get("given_name"),
            email=data.get("email"),
        )


class GitHubProvider(OAuthProviderClient):
    """GitHub OAuth apps. Profiles often hide the email; /user/emails has it."""

    provider = OAuthProvider.GITHUB
    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"
    PROFILE_URL = "https://api.github.com/user"
    EMAILS_URL = "https://api.github.com/user/emails"
    SCOPES = ["user:email"]

    def fetch_profile(self, access_token: str) -> FederatedProfile:
        data = self._request("GET", self.PROFILE_URL, headers=self._auth_headers(access_token))
        if not isinstance(data, Mapping) or data.get("id") is None:
            raise OAuthProviderError("Unexpected profile from github")
        return FederatedProfile(
            provider=self.provider,
            subject=str(data["id"]),
            display_name=data.get("name"),
            username=data.get("login"),
            email=data.get("email"),
        )


PROVIDERS: Mapping[OAuthProvider, type[OAuthProviderClient]] = {
    OAuthProvider.GOOGLE: GoogleProvider,
    OAuthProvider.GITHUB: GitHubProvider,
}


def get_provider(
    provider: OAuthProvider,
    settings: Settings,
    http_client: Optional[httpx.Client] = None,
) -> OAuthProviderClient:
    return PROVIDERS[provider](settings.oauth_client(provider), http_client=http_client)


__all__ = [
    "FederatedProfile",
    "OAuthProviderClient",
    "GoogleProvider",
    "GitHubProvider",
    "PROVIDERS",
    "get_provider",
]
