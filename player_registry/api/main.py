"""
FastAPI backend for the IDSC player registry.
Provides player registration, lookup, listing and statistics endpoints.
"""

import time
from datetime import datetime
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from player_registry import __version__, config
from player_registry.core.errors import MissingFieldError, RegistrationError
from player_registry.core.export import render_registration_summary
from player_registry.core.identifiers import preview_player_id
from player_registry.core.validation import ROLES, find_missing_fields
from player_registry.log import clear_log_context, get_logger, log_context, setup_logging
from .auth import create_access_token, get_current_player
from .database import SessionLocal, get_db, init_db, is_database_connected
from .models import Player
from .schemas import LoginRequest, parse_registration
from .store import (
    aggregate_stats,
    authenticate,
    create_player,
    current_sequence,
    ensure_counter,
    find_player,
    list_players,
    record_login,
)

log = get_logger(__name__)

app = FastAPI(
    title="IDSC Player Registry API",
    description="Backend API for IDSC cricket player registration",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STARTED_AT = time.monotonic()


def _now() -> datetime:
    """Server-local wall clock; player ids embed this date."""
    return datetime.now()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path and status; add security headers."""
    clear_log_context()
    log_context(method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        log.exception("request_failed")
        raise
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    if response.status_code >= 500:
        log.error("request_completed", status=response.status_code)
    else:
        log.info("request_completed", status=response.status_code)
    return response


# ===== Error mapping =====

@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": str(err["loc"][-1]) if err.get("loc") else "body", "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"success": False, "message": "Validation error", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Generic 500; exception text only when EXPOSE_ERROR_DETAILS is on."""
    log.error("unhandled_exception", exc_info=exc)
    content: dict[str, Any] = {"success": False, "message": "Something went wrong!"}
    if config.EXPOSE_ERROR_DETAILS:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
def on_startup():
    setup_logging()
    try:
        init_db()
        db = SessionLocal()
        try:
            ensure_counter(db)
        finally:
            db.close()
    except SQLAlchemyError as exc:
        log.critical("database_unavailable", error=str(exc))
        raise SystemExit(1) from exc
    log.info("registry_started", version=__version__, player_id_prefix=config.PLAYER_ID_PREFIX)


def _registration_metadata(request: Request, body: dict[str, Any]) -> dict[str, Any]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    elif request.client:
        ip = request.client.host
    else:
        ip = "unknown"
    return {
        "ip": ip,
        "userAgent": request.headers.get("user-agent", "unknown"),
        "timestamp": _now().isoformat(),
        "clientTimestamp": body.get("clientTimestamp") or int(time.time() * 1000),
        "clientRandom": body.get("clientRandom") or "none",
    }


def _get_player_or_404(db: Session, ident: str) -> Player:
    player = find_player(db, ident)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")
    return player


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "IDSC Player Registry API", "version": __version__}


@app.get("/health")
def health():
    return {
        "status": "OK",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "database": "Connected" if is_database_connected() else "Disconnected",
    }


@app.get("/api/sequence")
def get_sequence(db: Session = Depends(get_db)):
    """Current counter value and the id the next registration would get. Does not allocate."""
    sequence = current_sequence(db)
    return {
        "success": True,
        "currentSequence": sequence,
        "nextPlayerId": preview_player_id(sequence, _now().date()),
    }


# ----- Registration -----

@app.post("/api/players/register", status_code=201)
def register(request: Request, payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Validate, allocate ids and store a new player. Password is hashed, never echoed."""
    log.info("registration_received", first_name=payload.get("firstName"), last_name=payload.get("lastName"))
    missing = find_missing_fields(payload)
    if missing:
        log.info("registration_missing_fields", missing=missing)
        raise MissingFieldError(missing)

    now = _now()
    registration = parse_registration(payload, today=now.date())
    try:
        player = create_player(db, registration, _registration_metadata(request, payload), now=now)
    except RegistrationError:
        raise
    except Exception as exc:
        db.rollback()
        log.error("registration_failed", exc_info=exc)
        content: dict[str, Any] = {"success": False, "message": "Registration failed. Please try again."}
        if config.EXPOSE_ERROR_DETAILS:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return {
        "success": True,
        "message": "Registration successful! Welcome to IDSC Cricket Community!",
        **player.registration_summary(),
    }


# ----- Players -----

@app.get("/api/players")
def get_players(
    search: str | None = None,
    role: str | None = None,
    state: str | None = None,
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """Paginated player list; password and registration metadata are never included."""
    if role and role not in ROLES:
        raise HTTPException(status_code=400, detail=f"Unknown role: {role}")
    players, total = list_players(db, search=search, role=role, state=state, page=page, limit=limit)
    return {
        "success": True,
        "count": len(players),
        "totalCount": total,
        "totalPages": (total + limit - 1) // limit,
        "currentPage": page,
        "players": [p.to_public_dict() for p in players],
    }


@app.post("/api/players/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Login with username or email and password."""
    player = authenticate(db, request.login, request.password)
    record_login(db, player)
    log.info("player_logged_in", player_id=player.player_id)
    return {
        "success": True,
        "access_token": create_access_token(player.id),
        "player": player.to_public_dict(),
    }


@app.get("/api/players/me")
def get_me(player: Player = Depends(get_current_player)):
    return {"success": True, "player": player.to_public_dict()}


@app.get("/api/players/{ident}")
def get_player(ident: str, db: Session = Depends(get_db)):
    """Look up by player id, user id, internal key or username."""
    player = _get_player_or_404(db, ident)
    return {"success": True, "player": player.to_public_dict()}


@app.get("/api/players/{ident}/export")
def export_player(ident: str, db: Session = Depends(get_db)):
    """Registration details as a downloadable text file."""
    player = _get_player_or_404(db, ident)
    text = render_registration_summary(player.registration_summary(), generated_at=_now())
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="IDSC_Player_{player.player_id}.txt"'},
    )


@app.get("/api/stats")
def get_stats(db: Session = Depends(get_db)):
    return {"success": True, "stats": aggregate_stats(db, today=_now().date())}
