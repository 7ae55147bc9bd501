from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from . import auth
from .config import settings
from .db import SessionLocal, init_db, session_scope
from .errors import NotFoundError
from .logging_setup import configure_logging
from .routes.admin import router as admin_router
from .routes.public import render_not_found
from .routes.public import router as public_router


logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)


app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    max_age=settings.session_max_age_seconds,
    session_cookie=settings.session_cookie,
    same_site="lax",
    https_only=settings.session_https_only,
)

auth.subscribe(auth.log_auth_event)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)
    init_db()

    with session_scope() as db:
        auth.bootstrap_admin_if_needed(db)
    logger.info("%s started against %s", settings.app_name, settings.database_url.split("@")[-1])


def _current_user(request: Request):
    if "session" not in request.scope:
        return None
    db = SessionLocal()
    try:
        user = auth.get_session_user(db, request.session)
        if user:
            db.expunge(user)
        return user
    finally:
        db.close()


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)
    user = await run_in_threadpool(_current_user, request)
    return render_not_found(request, user=user)


@app.exception_handler(NotFoundError)
async def missing_row_handler(request: Request, exc: NotFoundError):
    user = await run_in_threadpool(_current_user, request)
    return render_not_found(request, user=user, title="App Not Found", detail=exc.message)


app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
app.include_router(public_router)
app.include_router(admin_router)
