import logging
from typing import Any, Dict, Optional, Protocol

import requests
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import AuthError
from .models import FormSubmission, LoginState, SessionUser

logger = logging.getLogger(__name__)

CREDENTIALS_PROVIDER = "credentials"
DEFAULT_LOGIN_REDIRECT = "/dashboard"
INVALID_CREDENTIALS_CODES = {"invalid_credentials", "invalid_grant"}


class IdentityProvider(Protocol):
    def sign_in(self, provider_id: str, form: FormSubmission) -> SessionUser: ...


class Credentials(BaseModel):
    email: str
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("invalid email")
        return value.strip()


class SupabaseCredentialsProvider:
    """Email/password sign-in against Supabase Auth (GoTrue)."""

    def __init__(self, supabase_url: Optional[str], anon_key: Optional[str]):
        self.supabase_url = (supabase_url or "").rstrip("/")
        self.anon_key = anon_key

    def sign_in(self, provider_id: str, form: FormSubmission) -> SessionUser:
        if provider_id != CREDENTIALS_PROVIDER:
            raise ValueError(f"Unsupported provider: {provider_id}")

        try:
            credentials = Credentials(email=form.get("email") or "", password=form.get("password") or "")
        except ValidationError:
            raise AuthError("CredentialsSignin") from None

        try:
            resp = requests.post(
                f"{self.supabase_url}/auth/v1/token?grant_type=password",
                headers={"apikey": self.anon_key or "", "Content-Type": "application/json"},
                json={"email": credentials.email, "password": credentials.password},
            )
        except requests.RequestException as exc:
            logger.warning("Supabase Auth unreachable: %s", exc)
            raise AuthError("CallbackRouteError", str(exc)) from exc

        if resp.status_code != 200:
            raise self._error_from_response(resp)

        user = resp.json().get("user") or {}
        return SessionUser(id=str(user.get("id", "")), email=user.get("email") or credentials.email)

    @staticmethod
    def _error_from_response(resp: requests.Response) -> AuthError:
        try:
            body: Dict[str, Any] = resp.json()
        except ValueError:
            body = {}
        code = body.get("error_code") or body.get("error")
        if resp.status_code == 400 and code in INVALID_CREDENTIALS_CODES:
            return AuthError("CredentialsSignin")
        logger.warning("Supabase Auth sign-in failed with status %s (%s)", resp.status_code, code)
        return AuthError("CallbackRouteError", f"Status Code: {resp.status_code}")


def safe_redirect(target: Optional[str]) -> str:
    """Only local paths are honoured as post-login destinations."""
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return DEFAULT_LOGIN_REDIRECT


def authenticate(provider: IdentityProvider, previous_state: Optional[LoginState], form: FormSubmission) -> LoginState:
    """Sign in with the credentials provider.

    ``previous_state`` is the state returned by the last attempt; it is
    accepted so the login form can round-trip it and is not consulted.
    Provider failures become user-facing messages, every other exception
    propagates.
    """
    try:
        user = provider.sign_in(CREDENTIALS_PROVIDER, form)
    except AuthError as error:
        if error.type == "CredentialsSignin":
            return LoginState(message="Invalid credentials.")
        return LoginState(message="Something went wrong.")

    logger.info("User %s signed in", user.id)
    return LoginState(user=user, redirect_to=safe_redirect(form.get("redirectTo")))


def sign_out(session: Dict[str, Any]) -> str:
    """Forget the signed-in user and return where to navigate."""
    session.clear()
    return "/login"
