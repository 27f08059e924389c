from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from theatre_web.api.router import router as api_router
from theatre_web.session import SessionStore


class _NoStoreMiddleware(BaseHTTPMiddleware):
    """Overlay payloads depend on the clock and the session, so clients must not cache them."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"
        return response


def create_app(store: SessionStore | None = None) -> FastAPI:
    sessions = store if store is not None else SessionStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        sessions.close_all()

    app = FastAPI(title="Theatre Overlay", lifespan=lifespan)
    app.add_middleware(_NoStoreMiddleware)
    app.state.sessions = sessions
    app.include_router(api_router)
    return app


app = create_app()
