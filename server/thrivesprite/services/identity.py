"""Supabase auth wrapper: anonymous sign-in, sign-out and session changes."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[str]], None]


@dataclass(frozen=True)
class SessionTokens:
    """Token pair a client keeps so a later connection can resume the same user."""

    access_token: str
    refresh_token: str

    def to_dict(self) -> dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


class IdentityError(RuntimeError):
    """Raised when the auth collaborator rejects a call."""


def _user_id(holder: Any) -> Optional[str]:
    user = getattr(holder, "user", None)
    user_id = getattr(user, "id", None)
    return str(user_id) if user_id else None


def _tokens(session: Any) -> Optional[SessionTokens]:
    access_token = getattr(session, "access_token", None)
    refresh_token = getattr(session, "refresh_token", None)
    if not access_token or not refresh_token:
        return None
    return SessionTokens(str(access_token), str(refresh_token))


class IdentityGateway:
    """Tracks the current user of one client session.

    Supabase auth state lives on the client object, so every studio session
    gets its own gateway (and client). A client that kept the token pair from
    an earlier connection hands it to :meth:`resume` to get the same user back.
    """

    def __init__(self, client: Optional[Client] = None) -> None:
        self._client = client
        self._enabled = client is not None or bool(settings.supabase_url and settings.supabase_anon_key)
        self._user_id: Optional[str] = None
        self._tokens: Optional[SessionTokens] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def tokens(self) -> Optional[SessionTokens]:
        return self._tokens

    def _ensure_client(self) -> Client:
        if not self._enabled:
            raise IdentityError("Supabase credentials missing; sign-in unavailable")
        if self._client is None:
            self._client = create_client(settings.supabase_url, settings.supabase_anon_key)
        return self._client

    async def _call(self, fn: Callable[[Client], Any]) -> Any:
        try:
            return await asyncio.to_thread(lambda: fn(self._ensure_client()))
        except IdentityError:
            raise
        except Exception as exc:
            logger.exception("Supabase auth call failed")
            raise IdentityError(str(exc) or exc.__class__.__name__) from exc

    def _remember(self, user_id: Optional[str], session: Any) -> None:
        self._user_id = user_id
        self._tokens = _tokens(session) if user_id else None

    async def current_user_id(self) -> Optional[str]:
        """Return the user of an existing session, if any."""

        if not self._enabled:
            return None
        session = await self._call(lambda client: client.auth.get_session())
        self._remember(_user_id(session), session)
        return self._user_id

    async def resume(self, access_token: str, refresh_token: str) -> str:
        """Restore the session described by a previously issued token pair."""

        if not access_token or not refresh_token:
            raise IdentityError("Both an access token and a refresh token are required")
        response = await self._call(lambda client: client.auth.set_session(access_token, refresh_token))
        user_id = _user_id(response)
        if not user_id:
            raise IdentityError("Session could not be restored")
        self._remember(user_id, getattr(response, "session", None))
        logger.info("Resumed session for user %s", user_id)
        return user_id

    async def sign_in_anonymously(self) -> str:
        response = await self._call(lambda client: client.auth.sign_in_anonymously())
        user_id = _user_id(response)
        if not user_id:
            raise IdentityError("Sign-in returned no user")
        self._remember(user_id, getattr(response, "session", None))
        logger.info("Anonymous user %s signed in", user_id)
        return user_id

    async def sign_out(self) -> None:
        await self._call(lambda client: client.auth.sign_out())
        logger.info("User %s signed out", self._user_id)
        self._remember(None, None)

    async def user_id_for_token(self, token: str) -> Optional[str]:
        """Resolve a bearer access token to its user id; ``None`` when rejected."""

        if not token or not self._enabled:
            return None
        try:
            response = await asyncio.to_thread(lambda: self._ensure_client().auth.get_user(token))
        except Exception as exc:
            # A bad token is routine, not a fault.
            logger.warning("Rejected access token: %s", exc)
            return None
        return _user_id(response)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` on the running loop whenever the session changes.

        Returns a callable that removes the subscription. Raises
        ``IdentityError`` when the listener cannot be registered.
        """

        if not self._enabled:
            return lambda: None

        loop = asyncio.get_running_loop()

        def _on_change(event: Any, session: Any) -> None:
            user_id = _user_id(session)
            self._remember(user_id, session)
            logger.debug("Auth state change %s for user %s", event, user_id)
            loop.call_soon_threadsafe(listener, user_id)

        try:
            subscription = self._ensure_client().auth.on_auth_state_change(_on_change)
        except IdentityError:
            raise
        except Exception as exc:
            raise IdentityError(str(exc) or exc.__class__.__name__) from exc
        return subscription.unsubscribe
