"""
Registration record store: sequence allocation, player creation and the read
queries behind the API.

Sequence numbers come from a single counter row bumped with one atomic
UPDATE ... RETURNING, committed on its own. Concurrent callers therefore never
share a number, and a number whose player insert later fails stays consumed.
"""

import json
import re
import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from player_registry import config
from player_registry.core.errors import (
    AccountInactiveError,
    AuthenticationError,
    DuplicateKeyError,
    IdGenerationError,
    StorageUnavailableError,
)
from player_registry.core.identifiers import format_player_id, generate_user_id, preview_player_id
from player_registry.log import get_logger
from .auth import hash_password, verify_password
from .models import Counter, Player
from .schemas import RegistrationRequest

log = get_logger(__name__)

# Column -> wire name for unique constraints, checked in this order
UNIQUE_COLUMNS = {
    "player_id": "playerId",
    "user_id": "userId",
    "sequence_number": "sequenceNumber",
    "email": "email",
    "username": "username",
    "phone": "phone",
}


# ===== Sequence allocator =====

def ensure_counter(db: Session) -> None:
    """Create the sequence counter row at 0 if it does not exist yet."""
    if db.get(Counter, config.SEQUENCE_COUNTER_KEY) is None:
        db.add(Counter(key=config.SEQUENCE_COUNTER_KEY, value=0))
        try:
            db.commit()
        except IntegrityError:
            # Another process seeded it first
            db.rollback()


def current_sequence(db: Session) -> int:
    """Last allocated sequence number (0 before the first registration)."""
    value = db.query(Counter.value).filter(Counter.key == config.SEQUENCE_COUNTER_KEY).scalar()
    return value or 0


def next_sequence(db: Session) -> int:
    """Atomically increment the counter and return the new value."""
    stmt = (
        update(Counter)
        .where(Counter.key == config.SEQUENCE_COUNTER_KEY)
        .values(value=Counter.value + 1)
        .returning(Counter.value)
        .execution_options(synchronize_session=False)
    )
    try:
        value = db.execute(stmt).scalar_one_or_none()
        if value is None:
            db.add(Counter(key=config.SEQUENCE_COUNTER_KEY, value=1))
            try:
                db.commit()
                value = 1
            except IntegrityError:
                # Lost the race to create the row; it exists now
                db.rollback()
                value = db.execute(stmt).scalar_one()
                db.commit()
        else:
            db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        log.error("sequence_allocation_failed", error=str(exc))
        raise IdGenerationError(f"Failed to generate Player ID: {exc}") from exc
    log.debug("sequence_allocated", sequence_number=value)
    return value


# ===== Creation =====

def find_duplicate_field(db: Session, registration: RegistrationRequest) -> str | None:
    """Wire name of the first unique contact/account field already registered."""
    checks = (
        ("email", Player.email, registration.email),
        ("username", Player.username, registration.username),
        ("phone", Player.phone, registration.phone),
    )
    for field, column, value in checks:
        if db.query(Player.id).filter(column == value).first() is not None:
            return field
    return None


def _duplicate_field_from_error(exc: IntegrityError) -> str:
    message = str(exc.orig)
    for column, field in UNIQUE_COLUMNS.items():
        if re.search(rf"[.(]{column}\b", message):
            return field
    return "record"


def _user_id_exists(db: Session):
    def exists(candidate: str) -> bool:
        return db.query(Player.id).filter(Player.user_id == candidate).first() is not None
    return exists


def create_player(
    db: Session,
    registration: RegistrationRequest,
    metadata: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> Player:
    """
    Register a validated player: duplicate check, allocate sequence, format ids,
    hash password, insert. Raises DuplicateKeyError, IdGenerationError or
    StorageUnavailableError.
    """
    now = now or datetime.now()
    try:
        duplicate = find_duplicate_field(db, registration)
    except OperationalError as exc:
        raise StorageUnavailableError("Database unavailable") from exc
    if duplicate:
        log.info("registration_duplicate", field=duplicate)
        raise DuplicateKeyError(duplicate)

    sequence_number = next_sequence(db)
    player_id = format_player_id(sequence_number, now.date())
    try:
        user_id = generate_user_id(_user_id_exists(db))
    except OperationalError as exc:
        raise StorageUnavailableError("Database unavailable") from exc

    player = Player(
        id=str(uuid.uuid4()),
        player_id=player_id,
        user_id=user_id,
        sequence_number=sequence_number,
        first_name=registration.first_name,
        middle_name=registration.middle_name,
        last_name=registration.last_name,
        date_of_birth=registration.date_of_birth,
        gender=registration.gender,
        email=registration.email,
        phone=registration.phone,
        street_address=registration.street_address,
        city=registration.city,
        state=registration.state,
        postal_code=registration.postal_code,
        country=registration.country,
        primary_sport=registration.primary_sport,
        role=registration.role,
        batting_order_preference=registration.batting_order_preference,
        bowling_style=registration.bowling_style,
        batting_style=registration.batting_style,
        bowling_arm=registration.bowling_arm,
        username=registration.username,
        password_hash=hash_password(registration.password),
        registration_date=now,
        registration_metadata=json.dumps(metadata or {}),
    )
    db.add(player)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        field = _duplicate_field_from_error(exc)
        log.warning("registration_conflict", field=field, sequence_number=sequence_number)
        raise DuplicateKeyError(field) from exc
    except OperationalError as exc:
        db.rollback()
        raise StorageUnavailableError("Database unavailable") from exc
    db.refresh(player)
    log.info(
        "player_registered",
        player_id=player.player_id,
        user_id=player.user_id,
        sequence_number=player.sequence_number,
    )
    return player


# ===== Queries =====

def find_player(db: Session, ident: str) -> Player | None:
    """Look up by player id, user id, internal key or username."""
    ident = ident.strip()
    if not ident:
        return None
    return (
        db.query(Player)
        .filter(
            or_(
                Player.player_id == ident.upper(),
                Player.user_id == ident.upper(),
                Player.id == ident,
                Player.username == ident,
            )
        )
        .first()
    )


def list_players(
    db: Session,
    search: str | None = None,
    role: str | None = None,
    state: str | None = None,
    page: int = 1,
    limit: int = config.DEFAULT_PAGE_SIZE,
) -> tuple[list[Player], int]:
    """Filtered page of players ordered by sequence number, plus the total match count."""
    query = db.query(Player)
    if search:
        term = search.strip().lower()
        query = query.filter(
            or_(*(
                func.lower(column).contains(term, autoescape=True)
                for column in (Player.first_name, Player.last_name, Player.player_id, Player.email, Player.city)
            ))
        )
    if role:
        query = query.filter(Player.role == role)
    if state:
        query = query.filter(Player.state == state)

    total = query.count()
    players = (
        query.order_by(Player.sequence_number.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return players, total


def aggregate_stats(db: Session, today: date | None = None) -> dict[str, Any]:
    today = today or date.today()
    count = func.count(Player.id)

    total = db.query(count).scalar() or 0
    active = db.query(count).filter(Player.status == "Active").scalar() or 0
    sequence = current_sequence(db)

    roles = db.query(Player.role, count).group_by(Player.role).order_by(count.desc(), Player.role).all()
    states = (
        db.query(Player.state, count)
        .group_by(Player.state)
        .order_by(count.desc(), Player.state)
        .limit(10)
        .all()
    )
    day = func.date(Player.registration_date)
    days = db.query(day, count).group_by(day).order_by(day.desc()).limit(7).all()

    return {
        "totalCount": total,
        "activeCount": active,
        "currentSequence": sequence,
        "nextSequenceNumber": sequence + 1,
        "nextPlayerId": preview_player_id(sequence, today),
        "countsByRole": [{"role": r, "count": c} for r, c in roles],
        "countsByState": [{"state": s, "count": c} for s, c in states],
        "countsByDay": [{"date": str(d), "count": c} for d, c in days],
    }


# ===== Login =====

def authenticate(db: Session, login: str, password: str) -> Player:
    login = login.strip()
    player = (
        db.query(Player)
        .filter(or_(Player.username == login, Player.email == login.lower()))
        .first()
    )
    if not player or not verify_password(password, player.password_hash):
        raise AuthenticationError("Invalid username/email or password")
    if player.status != "Active":
        raise AccountInactiveError(f"Account is {player.status}")
    return player


def record_login(db: Session, player: Player, now: datetime | None = None) -> Player:
    """Touches only the login fields."""
    player.last_login = now or datetime.now()
    player.login_count = (player.login_count or 0) + 1
    db.commit()
    db.refresh(player)
    return player
