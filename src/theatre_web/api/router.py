from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response

from theatre.domain.types import LngLat
from theatre.overlay.selection import SelectionError
from theatre.rules.conflicts import ConflictDataError
from theatre_web.api import mappers, schemas
from theatre_web.session import OverlaySession, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _store(request: Request) -> SessionStore:
    return request.app.state.sessions


def _session(request: Request, response: Response) -> OverlaySession:
    session_id, session = _store(request).get_or_create(request.cookies.get("session_id"))
    response.set_cookie("session_id", session_id, httponly=True)
    return session


def _build_response(
    session: OverlaySession | None, *, ok: bool, message: str | None = None, kind: str = "info"
) -> schemas.ApiResponse:
    payload = schemas.ApiResponse(ok=ok, message=message, message_kind=kind)
    if session is not None:
        payload.overlay = mappers.build_overlay_response(session)
    return payload


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/conflicts", response_model=schemas.ConflictListResponse)
async def list_conflicts(request: Request, response: Response):
    store = _store(request)
    session = _session(request, response)
    async with session.lock:
        try:
            summaries = store.catalog.summaries()
        except ConflictDataError as exc:
            logger.warning("Conflict catalog unavailable: %s", exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return mappers.build_conflict_list(summaries, session.composer.bundle.id)


@router.post("/conflict", response_model=schemas.ApiResponse)
async def select_conflict(payload: schemas.ConflictRequest, request: Request, response: Response):
    store = _store(request)
    session = _session(request, response)
    async with session.lock:
        if payload.conflict_id not in store.catalog.ids():
            raise HTTPException(status_code=404, detail=f"Unknown conflict: {payload.conflict_id}")
        try:
            bundle = store.catalog.load(payload.conflict_id)
        except ConflictDataError as exc:
            return _build_response(session, ok=False, message=str(exc), kind="error")
        session.composer.select_conflict(bundle)
        return _build_response(session, ok=True, message=f"Showing {bundle.summary.name}")


@router.get("/overlay", response_model=schemas.OverlayResponse)
async def get_overlay(request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        return mappers.build_overlay_response(session)


@router.post("/view", response_model=schemas.ApiResponse)
async def update_view(payload: schemas.ViewRequest, request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        view = session.view
        if payload.width is not None or payload.height is not None:
            width = payload.width or view.width
            height = payload.height or view.height
            if (width, height) != (view.width, view.height):
                view.resize(width, height)
        if payload.transparent_globe is not None:
            session.transparent_globe = payload.transparent_globe
        if payload.globe is not None and payload.globe != view.is_globe:
            view.set_globe(payload.globe)
        center = LngLat(lon=payload.center.lon, lat=payload.center.lat) if payload.center else None
        view.jump_to(center=center, zoom=payload.zoom, bearing=payload.bearing, pitch=payload.pitch)
        session.zoom.set(view.zoom)
        session.refresh_marker_filter()
        return _build_response(session, ok=True, message="View updated")


@router.post("/toggles", response_model=schemas.ApiResponse)
async def update_toggles(payload: schemas.ToggleRequest, request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        if payload.visible is not None:
            session.visible.set(payload.visible)
        if payload.show_troops is not None:
            session.show_troops.set(payload.show_troops)
        return _build_response(session, ok=True, message="Overlay toggles updated")


@router.post("/battles/close", response_model=schemas.ApiResponse)
async def close_battle(request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        session.composer.close_battle()
        return _build_response(session, ok=True, message="Battle details closed")


@router.post("/battles/{battle_id}/click", response_model=schemas.ApiResponse)
async def click_battle(battle_id: str, request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        try:
            site = session.composer.click_battle(battle_id)
        except SelectionError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        message = site.name if site is not None else "Battle details closed"
        return _build_response(session, ok=True, message=message)


@router.post("/troops/{unit_id}/click", response_model=schemas.ApiResponse)
async def click_troop(unit_id: str, request: Request, response: Response):
    session = _session(request, response)
    async with session.lock:
        try:
            unit = session.composer.click_troop(unit_id)
        except SelectionError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        message = unit.name if unit is not None else "Unit details closed"
        return _build_response(session, ok=True, message=message)
