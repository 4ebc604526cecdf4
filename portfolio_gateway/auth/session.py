from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..services.errors import GatewayError, error_message


class AuthError(GatewayError):
    """Raised when authentication with Supabase fails."""


@dataclass
class Session:
    """Represents an authenticated Supabase session."""

    user_id: str
    email: str
    access_token: str = ""
    refresh_token: Optional[str] = None


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def user_to_dict(user: Any) -> Dict[str, Any]:
    """Flatten a Supabase user object into a plain dict."""
    if isinstance(user, dict):
        return dict(user)
    dump = getattr(user, "model_dump", None)
    if callable(dump):
        data = dump()
        if isinstance(data, dict):
            return data
    return {"id": _field(user, "id"), "email": _field(user, "email")}


class SupabaseAuth:
    """Thin wrapper around the supabase-py auth client."""

    def __init__(self, client: Any) -> None:
        self._auth = client.auth

    def signup(self, email: str, password: str) -> Session:
        """Create a new account.

        Supabase may not return a session when email confirmation is
        enabled; the returned Session then has an empty access token.
        """
        try:
            response = self._auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            raise AuthError(error_message(exc)) from exc
        return self._to_session(response, fallback_email=email, action="Sign up")

    def login(self, email: str, password: str) -> Session:
        try:
            response = self._auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise AuthError(error_message(exc)) from exc
        return self._to_session(response, fallback_email=email, action="Sign in")

    def logout(self) -> None:
        try:
            self._auth.sign_out()
        except Exception as exc:
            raise AuthError(error_message(exc)) from exc

    def current_user(self) -> Optional[Dict[str, Any]]:
        """Return the user of the active session, or None when signed out."""
        response = self._auth.get_user()
        user = _field(response, "user")
        if user is None or not _field(user, "id"):
            return None
        return user_to_dict(user)

    def restore(self, access_token: str, refresh_token: Optional[str]) -> Session:
        """Re-attach tokens saved by an earlier sign-in to this client.

        supabase-py keeps its auth session in memory, so a new process has to
        call set_session before table requests carry the user's JWT.
        """
        try:
            response = self._auth.set_session(access_token, refresh_token or "")
        except Exception as exc:
            raise AuthError(error_message(exc)) from exc
        return self._to_session(response, fallback_email="", action="Session restore")

    def current_session(self) -> Optional[Session]:
        """Return the tokens the client holds now; they change when Supabase refreshes them."""
        session = self._auth.get_session()
        user = _field(session, "user")
        if session is None or not _field(user, "id"):
            return None
        return Session(
            user_id=str(_field(user, "id")),
            email=_field(user, "email") or "",
            access_token=_field(session, "access_token") or "",
            refresh_token=_field(session, "refresh_token"),
        )

    @staticmethod
    def _to_session(response: Any, fallback_email: str, action: str) -> Session:
        user = _field(response, "user")
        user_id = _field(user, "id")
        if not user_id:
            raise AuthError(f"{action} did not return a user")
        session = _field(response, "session")
        return Session(
            user_id=str(user_id),
            email=_field(user, "email") or fallback_email,
            access_token=_field(session, "access_token") or "",
            refresh_token=_field(session, "refresh_token"),
        )
