"""FastAPI application entrypoint for the ThriveSprite avatar studio."""
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .render.surface import Frame, RenderLoop
from .routers import avatars, scene, suggestions
from .services.identity import IdentityGateway
from .services.studio import Notification, StudioSession
from .services.suggestions import SuggestionGateway

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


class StudioConnection:
    """Binds one websocket to a studio session and its render loop."""

    def __init__(self, websocket: WebSocket, session: StudioSession, *, fps: float) -> None:
        self.websocket = websocket
        self.session = session
        self.loop = RenderLoop(session.surface, self._send_frame, fps=fps)
        self._outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        session.on_notify = self._queue_notification
        session.on_state = self.push_state

    def queue(self, message: dict[str, Any]) -> None:
        """Hand a message to the render loop, which owns all sends."""
        self._outbox.put_nowait(message)

    def _queue_notification(self, note: Notification) -> None:
        self.queue({"type": "notification", **note.to_dict()})

    def push_state(self, session: StudioSession) -> None:
        self.queue({"type": "state", **session.state()})
        self.queue({"type": "scene", **session.surface.scene_payload()})

    async def send(self, message: dict[str, Any]) -> None:
        await self.websocket.send_text(json.dumps(message))

    async def _send_frame(self, frame: Frame) -> None:
        while not self._outbox.empty():
            await self.send(self._outbox.get_nowait())
        await self.send(
            {
                "type": "frame",
                "elapsed": frame.elapsed,
                "transform": frame.transform.to_dict(),
                "camera": frame.camera,
            }
        )

    async def handle(self, message: dict[str, Any]) -> None:
        session = self.session
        kind = message.get("type")

        if kind == "select":
            session.panel.select(str(message.get("trait")), str(message.get("value")))
        elif kind == "color":
            session.panel.pick_color(str(message.get("slot")), str(message.get("color")))
        elif kind == "randomize":
            session.panel.randomize()
        elif kind == "set_config":
            config = message.get("config")
            if not isinstance(config, dict):
                raise ValueError("set_config requires a config object")
            session.panel.replace(session.config.merged(config))
        elif kind == "theme":
            session.surface.set_dark(bool(message.get("dark")))
            self.push_state(session)
        elif kind == "orbit":
            session.surface.camera.orbit(float(message.get("azimuth", 0.0)), float(message.get("polar", 0.0)))
        elif kind == "zoom":
            session.surface.camera.zoom(float(message.get("delta", 0.0)))
        elif kind == "pan":
            session.surface.camera.pan(float(message.get("dx", 0.0)), float(message.get("dy", 0.0)))
        elif kind == "save":
            session.spawn(session.save())
        elif kind == "suggest":
            session.spawn(session.request_suggestions(str(message.get("prompt") or "")))
        elif kind == "resume":
            session.spawn(
                session.resume(str(message.get("accessToken") or ""), str(message.get("refreshToken") or ""))
            )
        elif kind == "sign_in":
            session.spawn(session.sign_in())
        elif kind == "sign_out":
            session.spawn(session.sign_out())
        else:
            raise ValueError(f"Unknown message type: {kind}")


def default_session_factory() -> StudioSession:
    return StudioSession(
        persistence=avatars.get_persistence(),
        suggestions=SuggestionGateway(),
        identity=IdentityGateway(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Studio service starting (render fps=%s)", settings.render_fps)
    yield


def create_app(session_factory: Optional[Callable[[], StudioSession]] = None) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    application = FastAPI(
        title="ThriveSprite Avatar Studio",
        description="Customize, preview and save cartoon avatars, with AI style suggestions.",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    application.include_router(scene.router)
    application.include_router(avatars.router)
    application.include_router(suggestions.router)
    application.state.session_factory = session_factory or default_session_factory

    @application.websocket("/ws/studio")
    async def studio_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        session = websocket.app.state.session_factory()
        connection = StudioConnection(websocket, session, fps=settings.render_fps)
        render_task = asyncio.create_task(connection.loop.run())
        try:
            await session.start(
                websocket.query_params.get("access_token"),
                websocket.query_params.get("refresh_token"),
            )
            connection.push_state(session)
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if not isinstance(message, dict):
                        raise ValueError("Messages must be JSON objects")
                    await connection.handle(message)
                except (ValueError, TypeError) as exc:
                    connection.queue({"type": "error", "error": str(exc)})
        except WebSocketDisconnect:
            logger.info("Studio client disconnected")
        finally:
            connection.loop.stop()
            render_task.cancel()
            await asyncio.gather(render_task, return_exceptions=True)
            await session.close()

    @application.get("/")
    async def root() -> dict[str, str]:
        """Lightweight health endpoint for service discovery."""
        return {"service": "thrivesprite-studio", "status": "ok"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
