"""Read API for published player statistics."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

import anyio
from fastapi import FastAPI, HTTPException, Query, Request, Response
from starlette.concurrency import run_in_threadpool

from clubstats.api.schemas import MenuSettingsResponse, PlayerStatsResponse, RegisteredSeasonsResponse
from clubstats.config import EngineSettings
from clubstats.config_loader import load_settings
from clubstats.exceptions import ClubStatsError
from clubstats.persistence import SqliteDocumentStore
from clubstats.service import PlayerStatsService
from clubstats.store import DocumentStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

STATS_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"
_TRUTHY = {"1", "true", "yes"}
DISCONNECT_POLL_SECONDS = 0.25


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


async def _call(fn: Callable[..., T], *args, **kwargs) -> T:
    try:
        return await run_in_threadpool(fn, *args, **kwargs)
    except ClubStatsError as exc:
        if exc.status_code >= 500:
            logger.exception("Request failed: %s", exc)
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


async def _cancel_on_disconnect(request: Request, cancel_event: threading.Event, poll_seconds: float) -> None:
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected; cancelling %s", request.url.path)
            cancel_event.set()
            return
        await anyio.sleep(poll_seconds)


async def _call_until_disconnect(request: Request, fn: Callable[..., T], *args, **kwargs) -> T:
    """Like ``_call``, passing a ``cancel_event`` that is set once the client goes away."""

    cancel_event = threading.Event()
    failure: Optional[HTTPException] = None
    async with anyio.create_task_group() as tg:
        tg.start_soon(_cancel_on_disconnect, request, cancel_event, DISCONNECT_POLL_SECONDS)
        try:
            result = await _call(fn, *args, cancel_event=cancel_event, **kwargs)
        except HTTPException as exc:
            failure = exc
        finally:
            tg.cancel_scope.cancel()
    if failure is not None:
        raise failure
    return result


def create_app(store: DocumentStore | None = None, settings: EngineSettings | None = None) -> FastAPI:
    app = FastAPI(title="clubstats")
    settings = settings or load_settings()
    if store is None:
        store = SqliteDocumentStore(settings.db_path)
    service = PlayerStatsService(store, settings=settings)
    app.state.store = store
    app.state.service = service

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/clubs/{club_id}/menu-settings", response_model=MenuSettingsResponse)
    async def menu_settings(club_id: str, response: Response):
        club = await _call(service.resolve_club, club_id)
        response.headers["Cache-Control"] = "no-store, max-age=0"
        return MenuSettingsResponse(settings=club.display_settings)

    @app.get("/clubs/{club_id}/players/{player_id}/stats", response_model=PlayerStatsResponse)
    async def player_stats(
        club_id: str,
        player_id: str,
        request: Request,
        response: Response,
        season: Optional[str] = Query(None),
        include_summaries: Optional[str] = Query(None, alias="includeSummaries"),
        force: Optional[str] = Query(None),
    ):
        result = await _call_until_disconnect(
            request,
            service.get_player_stats,
            club_id,
            player_id,
            season=season,
            include_summaries=_flag(include_summaries),
            force=_flag(force),
        )
        response.headers["Cache-Control"] = STATS_CACHE_CONTROL
        return PlayerStatsResponse.from_result(result)

    @app.post("/clubs/{club_id}/players/{player_id}/stats/invalidate")
    async def invalidate_player_stats(club_id: str, player_id: str):
        await _call(service.invalidate_player_stats, club_id, player_id)
        return {"status": "ok"}

    @app.get("/clubs/{club_id}/players/{player_id}/seasons", response_model=RegisteredSeasonsResponse)
    async def registered_seasons(club_id: str, player_id: str):
        registered = await _call(service.get_registered_seasons, club_id, player_id)
        return RegisteredSeasonsResponse(owner_uid=registered.owner_uid, player_id=player_id, seasons=registered.seasons)

    return app


__all__ = ["create_app"]
