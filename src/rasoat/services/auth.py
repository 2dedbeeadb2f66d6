"""Sign-in through Supabase Auth and the admin allow-list check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

from supabase import Client

from ..config import settings
from ..db.supabase import get_supabase_client

logger = logging.getLogger(__name__)

_LOGIN_MESSAGES = {
    "invalid_email": "Email không hợp lệ.",
    "email_address_invalid": "Email không hợp lệ.",
    "user_not_found": "Tài khoản không tồn tại.",
    "wrong_password": "Mật khẩu không đúng.",
    "invalid_credentials": "Email hoặc mật khẩu không đúng.",
    "invalid_grant": "Email hoặc mật khẩu không đúng.",
}
_LOGIN_FAILED = "Đăng nhập thất bại. Vui lòng thử lại."
_LOGOUT_FAILED = "Đăng xuất thất bại. Vui lòng thử lại."


@dataclass(frozen=True, slots=True)
class Identity:
    """The signed-in account behind a request."""

    email: Optional[str]
    user_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SignInResult:
    access_token: str
    refresh_token: Optional[str]
    identity: Identity


class AuthError(Exception):
    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def is_authorized_user(identity: Identity | None, allowed: Iterable[str] | None = None) -> bool:
    """Case-insensitive exact match of the identity's email against the allow-list."""
    if identity is None or not identity.email:
        return False
    allowed_emails = {email.strip().lower() for email in (allowed if allowed is not None else settings.authorized_emails)}
    return identity.email.strip().lower() in allowed_emails


def login_error_message(code: str | None) -> str:
    if not code:
        return _LOGIN_FAILED
    return _LOGIN_MESSAGES.get(code.removeprefix("auth/").replace("-", "_"), _LOGIN_FAILED)


def _identity_from_user(user) -> Identity:
    return Identity(email=getattr(user, "email", None), user_id=getattr(user, "id", None))


class SupabaseAuthProvider:
    """Thin wrapper over ``client.auth`` returning our own identity types."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def sign_in(self, email: str, password: str) -> SignInResult:
        try:
            response = self._client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            code = getattr(exc, "code", None)
            logger.warning(f"Login failed for {email}: {code or exc}")
            raise AuthError(login_error_message(code), code=code) from exc
        session = response.session
        if session is None or response.user is None:
            raise AuthError(_LOGIN_FAILED)
        return SignInResult(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            identity=_identity_from_user(response.user),
        )

    def resolve(self, access_token: str) -> Identity | None:
        """Identity for a bearer token, or None when the token is not accepted."""
        try:
            response = self._client.auth.get_user(access_token)
        except Exception as exc:
            logger.info(f"Rejected access token: {getattr(exc, 'code', None) or exc}")
            return None
        if response is None or response.user is None:
            return None
        return _identity_from_user(response.user)

    def sign_out(self, access_token: str) -> None:
        try:
            self._client.auth.admin.sign_out(access_token)
        except Exception as exc:
            logger.error(f"Logout error: {exc}")
            raise AuthError(_LOGOUT_FAILED, code=getattr(exc, "code", None)) from exc


@lru_cache()
def get_auth_provider() -> SupabaseAuthProvider | None:
    client = get_supabase_client()
    if client is None:
        return None
    return SupabaseAuthProvider(client)
