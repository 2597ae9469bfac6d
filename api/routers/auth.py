"""
Auth API Endpoints.

Local registration/login, token checks, and the federated (OAuth) flow.

Local auth answers with JSON. The federated callback never does: the user agent
is mid-redirect, so success and failure are both redirects to the frontend.
"""

import json
import logging
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse

from api.dependencies import TOKEN_COOKIE, get_current_principal, get_oauth_http_client
from api.models import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    SuccessResponse,
    UserOut,
    UserResponse,
    UserSummary,
)
from domain.errors import LeadDeskError, ValidationError
from domain.principal import Principal, parse_oauth_provider
from services import auth_service, federated_identity_service
from services.federated_identity_service import NoEmailAvailableError
from services.oauth_providers import get_provider
from services.settings import Settings, get_settings
from services.token_service import get_token_issuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _set_token_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=int(settings.cookie_lifetime.total_seconds()),
        httponly=True,
        secure=settings.production,
        samesite="lax",
    )


def _token_response(principal: Principal, response: Response, settings: Settings) -> AuthResponse:
    token = auth_service.issue_token(principal)
    _set_token_cookie(response, token, settings)
    return AuthResponse(token=token, user=UserSummary.from_principal(principal))


def _oauth_error_redirect(settings: Settings, error: str, message: str) -> RedirectResponse:
    query = urlencode({"error": error, "message": message})
    return RedirectResponse(f"{settings.client_url}/oauth-error?{query}", status_code=302)


# ----------------------------------------------------------------------------
# Local authentication
# ----------------------------------------------------------------------------

@router.post(
    "/register",
    response_model=AuthResponse,
    summary="Register",
    description="Create a local account and return a bearer token (also set as a cookie).",
)
def register(
    request: RegisterRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    principal = auth_service.register(request.name, request.email, request.password, request.role)
    return _token_response(principal, response, settings)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Authenticate with email and password.",
)
def login(
    request: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
):
    """
    Unknown email and wrong password produce the same 401 payload, so the
    response never reveals which part failed.
    """
    principal = auth_service.login(request.email, request.password)
    return _token_response(principal, response, settings)


@router.get("/verify-token", summary="Verify Token")
def verify_token(principal: Principal = Depends(get_current_principal)):
    return {"success": True}


@router.get("/me", response_model=UserResponse, summary="Current User")
def get_me(principal: Principal = Depends(get_current_principal)):
    return UserResponse(data=UserOut.from_principal(principal))


@router.get("/logout", response_model=SuccessResponse, summary="Logout")
def logout(response: Response, principal: Principal = Depends(get_current_principal)):
    """
    Clears the token cookie.

    Tokens are stateless, so an outstanding token stays valid until it expires;
    the client is expected to discard it.
    """
    response.delete_cookie(TOKEN_COOKIE, httponly=True, samesite="lax")
    logger.info("Principal logged out: %s", principal.id)
    return SuccessResponse()


# ----------------------------------------------------------------------------
# Federated authentication
# ----------------------------------------------------------------------------

@router.get("/failure", summary="OAuth Failure")
def oauth_failure(settings: Settings = Depends(get_settings)):
    return _oauth_error_redirect(settings, "authentication_failed", "Authentication failed")


@router.get("/{provider}", summary="Start OAuth Flow")
def start_oauth(
    provider: str,
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.Client] = Depends(get_oauth_http_client),
):
    """Redirect the user agent to the provider's consent screen."""
    try:
        parsed = parse_oauth_provider(provider)
        client = get_provider(parsed, settings, http_client)
    except ValidationError as e:
        return _oauth_error_redirect(settings, "invalid_provider", e.message)
    except LeadDeskError as e:
        logger.error("Cannot start %s OAuth flow: %s", provider, e.message)
        return _oauth_error_redirect(settings, "authentication_failed", "Authentication failed")

    state = get_token_issuer().issue_oauth_state(parsed)
    return RedirectResponse(client.authorization_url(state), status_code=302)


@router.get("/{provider}/callback", summary="Complete OAuth Flow")
def oauth_callback(
    provider: str,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    http_client: Optional[httpx.Client] = Depends(get_oauth_http_client),
):
    """
    Finish the provider round-trip and hand the token to the frontend.

    **Success:** `{CLIENT_URL}/oauth-success?token=...&user=<JSON>`

    **Failure:** `{CLIENT_URL}/oauth-error?error=<code>&message=<text>` where code
    is `no_email`, `authentication_failed` or `invalid_provider`.
    """
    try:
        parsed = parse_oauth_provider(provider)
    except ValidationError as e:
        return _oauth_error_redirect(settings, "invalid_provider", e.message)

    if error:
        logger.warning("%s OAuth denied by provider: %s", parsed.value, error)
        return _oauth_error_redirect(settings, "authentication_failed", "Authentication failed")

    try:
        get_token_issuer().verify_oauth_state(state, parsed)
        client = get_provider(parsed, settings, http_client)
        access_token = client.exchange_code(code or "")
        profile = client.fetch_profile(access_token)
        principal = federated_identity_service.resolve(client, profile, access_token)
    except NoEmailAvailableError as e:
        logger.warning("%s OAuth login without a usable email", parsed.value)
        return _oauth_error_redirect(settings, "no_email", e.message)
    except LeadDeskError as e:
        logger.warning("%s OAuth login failed: %s", parsed.value, e.message)
        return _oauth_error_redirect(settings, "authentication_failed", "Authentication failed")

    token = auth_service.issue_token(principal)
    query = urlencode({"token": token, "user": json.dumps(principal.public_view())})
    redirect = RedirectResponse(f"{settings.client_url}/oauth-success?{query}", status_code=302)
    _set_token_cookie(redirect, token, settings)
    return redirect
