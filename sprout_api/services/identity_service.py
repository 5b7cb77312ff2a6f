from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from sprout_api.settings import get_settings

logger = logging.getLogger(__name__)

AUTH_MESSAGES = {
    "INVALID_LOGIN_CREDENTIALS": "Sign-in failed. Check your credentials.",
    "INVALID_PASSWORD": "Sign-in failed. Check your credentials.",
    "EMAIL_NOT_FOUND": "Sign-in failed. Check your credentials.",
    "USER_DISABLED": "This account has been disabled.",
    "EMAIL_EXISTS": "An account with this email already exists.",
    "WEAK_PASSWORD": "Password should be at least 6 characters.",
    "INVALID_EMAIL": "Enter a valid email address.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Try again later.",
    "INVALID_IDP_RESPONSE": "Sign-in with the provider failed.",
    "FEDERATED_USER_ID_ALREADY_LINKED": "Sign-in with the provider failed.",
    "IDENTITY_NOT_CONFIGURED": "Sign-in is not available right now.",
    "PROVIDER_UNAVAILABLE": "Sign-in is not available right now.",
}
DEFAULT_AUTH_MESSAGE = "Sign-in failed. Check your credentials."


class IdentityError(Exception):
    def __init__(self, code: str, status_code: int = 401) -> None:
        self.code = code
        self.status_code = status_code
        super().__init__(code)

    @property
    def message(self) -> str:
        return AUTH_MESSAGES.get(self.code, DEFAULT_AUTH_MESSAGE)


def _error_code(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return "UNKNOWN"
    raw = str(((payload or {}).get("error") or {}).get("message") or "UNKNOWN")
    # The provider appends detail after " : ", e.g. "WEAK_PASSWORD : Password should be ...".
    return raw.split(" : ", 1)[0].strip() or "UNKNOWN"


def _identity_payload(data: dict) -> dict:
    return {
        "user_id": data.get("localId"),
        "email": data.get("email"),
        "display_name": data.get("displayName") or "",
        "id_token": data.get("idToken"),
        "refresh_token": data.get("refreshToken"),
        "provider_id": data.get("providerId") or "password",
        "is_new_user": bool(data.get("isNewUser") or data.get("kind", "").endswith("SignupNewUserResponse")),
    }


async def _post(endpoint: str, body: dict, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    settings = get_settings()
    if not settings.identity_configured:
        raise IdentityError("IDENTITY_NOT_CONFIGURED", status_code=503)
    url = f"{settings.identity_base_url.rstrip('/')}/accounts:{endpoint}"
    try:
        async with httpx.AsyncClient(timeout=20, transport=transport) as client:
            response = await client.post(url, params={"key": settings.identity_api_key}, json=body)
    except httpx.HTTPError as exc:
        logger.error("Identity provider unreachable: %s", exc)
        raise IdentityError("PROVIDER_UNAVAILABLE", status_code=503) from exc
    if response.status_code >= 400:
        code = _error_code(response)
        logger.warning("Identity provider rejected %s: %s", endpoint, code)
        raise IdentityError(code)
    data = response.json()
    if not data.get("localId"):
        raise IdentityError("UNKNOWN")
    return data


async def sign_in_with_password(email: str, password: str, transport=None) -> dict:
    data = await _post(
        "signInWithPassword",
        {"email": email.strip(), "password": password, "returnSecureToken": True},
        transport=transport,
    )
    return _identity_payload(data)


async def sign_up(email: str, password: str, transport=None) -> dict:
    data = await _post(
        "signUp",
        {"email": email.strip(), "password": password, "returnSecureToken": True},
        transport=transport,
    )
    return _identity_payload(data)


async def sign_in_with_provider(provider_id: str, id_token: str, transport=None) -> dict:
    settings = get_settings()
    data = await _post(
        "signInWithIdp",
        {
            "postBody": urlencode({"id_token": id_token, "providerId": provider_id}),
            "requestUri": settings.identity_request_uri(),
            "returnIdpCredential": True,
            "returnSecureToken": True,
        },
        transport=transport,
    )
    return _identity_payload(data)
