"""Supabase persistence for one avatar configuration per user."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from supabase import Client, create_client

from ..config import settings
from ..models.schemas import AvatarConfig

logger = logging.getLogger(__name__)


class AuthenticationRequiredError(RuntimeError):
    """Raised when saving without an authenticated user."""


class PersistenceError(RuntimeError):
    """Raised when the storage collaborator rejects or fails a call."""


class AvatarPersistence:
    """Load/upsert avatar configurations in the ``avatars`` table, keyed by user id."""

    def __init__(
        self,
        client: Optional[Client] = None,
        *,
        table: Optional[str] = None,
    ) -> None:
        self._client = client
        self._enabled = client is not None or bool(
            settings.supabase_url and settings.supabase_service_role_key
        )
        self._table = table or settings.avatars_table
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        """Return whether Supabase persistence is configured."""

        return self._enabled

    def _ensure_client(self) -> Client:
        if not self._enabled:
            raise PersistenceError("Supabase credentials missing; persistence disabled")
        if self._client is None:
            self._client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        return self._client

    async def _execute(self, fn: Callable[[Client], Any]) -> Any:
        async with self._lock:
            try:
                return await asyncio.to_thread(lambda: fn(self._ensure_client()))
            except PersistenceError:
                raise
            except Exception as exc:
                logger.exception("Supabase avatar operation failed")
                raise PersistenceError(str(exc) or exc.__class__.__name__) from exc

    async def load(self, user_id: str) -> Optional[AvatarConfig]:
        """Return the stored configuration merged over defaults, or ``None`` when absent.

        Storage errors and unreadable records are logged and reported as
        absent, so callers keep their current configuration.
        """

        if not user_id or not self._enabled:
            return None

        try:
            result = await self._execute(
                lambda client: client.table(self._table)
                .select("config")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except PersistenceError as exc:
            logger.warning("Could not load avatar for user %s: %s", user_id, exc)
            return None

        # maybe_single() yields no response at all for a missing row in some client versions.
        row = getattr(result, "data", None)
        if isinstance(row, list):
            row = row[0] if row else None
        if not isinstance(row, dict):
            return None

        stored = row.get("config")
        if not isinstance(stored, dict):
            if stored is not None:
                logger.warning("Ignoring malformed avatar record for user %s", user_id)
            return None
        return AvatarConfig.from_partial(stored)

    async def save(self, user_id: Optional[str], config: AvatarConfig) -> None:
        """Insert or replace the user's configuration."""

        if not user_id:
            raise AuthenticationRequiredError("Sign in before saving your avatar")

        row = {"user_id": user_id, "config": config.to_record()}
        await self._execute(
            lambda client: client.table(self._table).upsert(row, on_conflict="user_id").execute()
        )
        logger.info("Saved avatar for user %s", user_id)
