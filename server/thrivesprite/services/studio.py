"""Per-client studio session: the page controller behind the customizer."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Coroutine, List, Optional, Set

from ..customizer import CustomizerPanel
from ..models.schemas import AvatarConfig
from ..render.surface import RenderSurface
from .identity import IdentityError, IdentityGateway
from .suggestions import SuggestionError, SuggestionGateway, apply_suggestions
from .supabase_persistence import AuthenticationRequiredError, AvatarPersistence, PersistenceError

logger = logging.getLogger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    AUTH_REQUIRED = "auth_required"
    FAILED = "failed"


@dataclass(frozen=True)
class Notification:
    """Transient user-facing message (a toast)."""

    title: str
    description: str
    variant: str = "default"

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description, "variant": self.variant}


NotificationListener = Callable[[Notification], None]
StateListener = Callable[["StudioSession"], None]


class StudioSession:
    """Owns the configuration, the preview surface and the signed-in user of one client."""

    def __init__(
        self,
        persistence: AvatarPersistence,
        suggestions: SuggestionGateway,
        identity: IdentityGateway,
        *,
        surface: Optional[RenderSurface] = None,
    ) -> None:
        self.persistence = persistence
        self.suggestions = suggestions
        self.identity = identity
        self.surface = surface or RenderSurface()
        self.panel = CustomizerPanel(self.surface.config, on_change=self._config_changed)
        self.user_id: Optional[str] = None
        self.generating = False
        self.notifications: List[Notification] = []
        self.on_notify: Optional[NotificationListener] = None
        self.on_state: Optional[StateListener] = None
        self._tasks: Set[asyncio.Task[Any]] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._session_task: Optional[asyncio.Task[Any]] = None

    @property
    def config(self) -> AvatarConfig:
        return self.panel.config

    def _config_changed(self, config: AvatarConfig) -> None:
        self.surface.set_config(config)
        self._emit_state()

    def _emit_state(self) -> None:
        if self.on_state is not None:
            self.on_state(self)

    def notify(self, title: str, description: str, variant: str = "default") -> Notification:
        note = Notification(title, description, variant)
        self.notifications.append(note)
        if self.on_notify is not None:
            self.on_notify(note)
        return note

    # --- lifecycle ------------------------------------------------------

    async def start(self, access_token: Optional[str] = None, refresh_token: Optional[str] = None) -> None:
        """Pick up an existing session and follow later sign-in/sign-out events.

        A token pair from an earlier connection is resumed first; without one
        (or when it is rejected) the client's own stored session is checked.
        """

        if access_token and refresh_token:
            await self.resume(access_token, refresh_token)
        if self.user_id is None:
            try:
                user_id = await self.identity.current_user_id()
            except IdentityError as exc:
                logger.warning("Session check failed: %s", exc)
                user_id = None
            if user_id:
                await self._follow_user(user_id)
        try:
            self._unsubscribe = self.identity.subscribe(self._on_session_change)
        except IdentityError as exc:
            logger.warning("Auth events unavailable; continuing without them: %s", exc)

    def _on_session_change(self, user_id: Optional[str]) -> None:
        if self._claim_user(user_id):
            self._session_task = self.spawn(self._load_user_avatar())

    async def _follow_user(self, user_id: Optional[str]) -> None:
        if self._claim_user(user_id):
            await self._load_user_avatar()
        elif self._session_task is not None and not self._session_task.done():
            await self._session_task

    def _claim_user(self, user_id: Optional[str]) -> bool:
        # Sign-in results and auth events race; whichever arrives first does the load.
        if user_id == self.user_id:
            return False
        self.user_id = user_id
        return True

    async def _load_user_avatar(self) -> None:
        user_id = self.user_id
        if not user_id:
            self.panel.replace(AvatarConfig())
            return
        stored = await self.persistence.load(user_id)
        if stored is not None and self.user_id == user_id:
            self.panel.replace(stored)
        else:
            self._emit_state()

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run ``coro`` in the background, tied to this session's lifetime."""

        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close(self) -> None:
        """Abandon in-flight calls whose results nobody will see."""

        if self._unsubscribe is not None:
            try:
                self._unsubscribe()
            except Exception:  # pragma: no cover - best effort during teardown
                logger.debug("Auth unsubscribe failed", exc_info=True)
            self._unsubscribe = None
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()

    # --- identity -------------------------------------------------------

    async def resume(self, access_token: str, refresh_token: str) -> bool:
        """Continue as the user an earlier connection signed in."""

        try:
            user_id = await self.identity.resume(access_token, refresh_token)
        except IdentityError as exc:
            logger.warning("Could not resume session: %s", exc)
            self.notify(
                "Sessão expirada",
                "Conecte-se novamente para salvar seu avatar.",
                "destructive",
            )
            return False
        await self._follow_user(user_id)
        return True

    async def sign_in(self) -> bool:
        try:
            user_id = await self.identity.sign_in_anonymously()
        except IdentityError as exc:
            self.notify("Erro ao conectar", str(exc), "destructive")
            return False
        self.notify("Bem-vindo!", "Você está conectado. Agora pode salvar seu avatar!")
        await self._follow_user(user_id)
        return True

    async def sign_out(self) -> bool:
        try:
            await self.identity.sign_out()
        except IdentityError as exc:
            self.notify("Erro ao desconectar", str(exc), "destructive")
            return False
        self.notify("Desconectado", "Você foi desconectado com sucesso.")
        await self._follow_user(None)
        return True

    # --- actions --------------------------------------------------------

    async def save(self) -> SaveOutcome:
        try:
            await self.persistence.save(self.user_id, self.config)
        except AuthenticationRequiredError:
            self.notify(
                "Conecte-se primeiro",
                "Você precisa estar conectado para salvar seu avatar.",
                "destructive",
            )
            return SaveOutcome.AUTH_REQUIRED
        except PersistenceError as exc:
            self.notify("Erro ao salvar", str(exc), "destructive")
            return SaveOutcome.FAILED
        self.notify("Avatar salvo!", "Seu avatar foi salvo com sucesso.")
        return SaveOutcome.SAVED

    async def request_suggestions(self, prompt: str = "") -> bool:
        """Merge AI suggestions into the configuration; one request at a time."""

        if self.generating:
            logger.info("Suggestion request already in flight; ignoring")
            return False

        self.generating = True
        self._emit_state()
        try:
            result = await self.suggestions.suggest(prompt)
        except SuggestionError:
            self.notify(
                "Erro na IA",
                "Não foi possível gerar sugestões. Tente novamente.",
                "destructive",
            )
            return False
        finally:
            self.generating = False
            self._emit_state()

        self.panel.replace(apply_suggestions(self.config, result))
        self.notify(
            "Sugestões geradas!",
            result.description or "Avatar atualizado com sugestões da IA.",
        )
        return True

    def state(self) -> dict[str, Any]:
        tokens = self.identity.tokens if self.user_id else None
        return {
            "userId": self.user_id,
            "generating": self.generating,
            "dark": self.surface.dark,
            "session": tokens.to_dict() if tokens is not None else None,
            "config": self.config.to_record(),
        }
