"""Tests for the registration record store."""

import json
from datetime import date, datetime

import pytest

from conftest import FIXED_NOW, make_payload
from player_registry.api import store
from player_registry.api.auth import verify_password
from player_registry.api.schemas import parse_registration
from player_registry.core.errors import AccountInactiveError, AuthenticationError, DuplicateKeyError
from player_registry.core.validation import calculate_age


def register(db, n=0, now=FIXED_NOW, metadata=None, **overrides):
    registration = parse_registration(make_payload(n, **overrides), today=now.date())
    return store.create_player(db, registration, metadata, now=now)


def test_end_to_end_example(db_session):
    player = register(db_session)
    assert player.player_id == "IDSC0104102025"
    assert player.sequence_number == 1
    assert player.full_name == "Anil Kumble"
    assert player.user_id.startswith("USER_")


def test_round_trip_by_player_id(db_session):
    extras = {"middleName": "R", "bowlingStyle": "Spin", "bowlingArm": "Right-arm Spin", "country": "India"}
    data = make_payload(**extras)
    created = register(db_session, **extras)
    db_session.expire_all()

    found = store.find_player(db_session, created.player_id)
    assert found is not None
    public = found.to_public_dict()
    for key, value in data.items():
        if key in ("password", "dateOfBirth"):
            continue
        assert public[key] == value, key
    assert found.date_of_birth == date(2005, 1, 1)
    assert public["fullName"] == "Anil R Kumble"
    assert public["age"] == calculate_age(date(2005, 1, 1), date.today())
    assert "password" not in public and "passwordHash" not in public
    assert "registrationMetadata" not in public


def test_password_is_hashed(db_session):
    player = register(db_session)
    assert player.password_hash != "secret1"
    assert player.password_hash.startswith("$2")
    assert verify_password("secret1", player.password_hash)
    assert not verify_password("secret2", player.password_hash)


def test_defaults_on_new_record(db_session):
    player = register(db_session)
    assert player.status == "Active"
    assert player.login_count == 0
    assert player.last_login is None
    assert not (player.email_verified or player.phone_verified or player.documents_verified)
    assert player.registration_date == FIXED_NOW


def test_sequence_numbers_follow_counter(db_session):
    players = [register(db_session, n) for n in range(1, 4)]
    assert [p.sequence_number for p in players] == [1, 2, 3]
    assert [p.player_id for p in players] == ["IDSC0104102025", "IDSC0204102025", "IDSC0304102025"]
    assert len({p.user_id for p in players}) == 3


def test_counter_does_not_reset_on_a_new_day(db_session):
    register(db_session, 1)
    second = register(db_session, 2, now=datetime(2025, 10, 5, 9, 0))
    assert second.sequence_number == 2
    assert second.player_id == "IDSC0205102025"


@pytest.mark.parametrize("field,overrides", [
    ("email", {"email": "A@B.com"}),
    ("username", {"username": "anilk"}),
    ("phone", {"phone": "9876543210"}),
])
def test_duplicates_are_rejected_by_field(db_session, field, overrides):
    original = register(db_session)
    other = make_payload(5)
    other.update(overrides)
    with pytest.raises(DuplicateKeyError) as info:
        store.create_player(db_session, parse_registration(other, today=FIXED_NOW.date()), now=FIXED_NOW)
    assert info.value.field == field
    assert info.value.to_dict()["field"] == field

    db_session.expire_all()
    unchanged = store.find_player(db_session, original.player_id)
    assert unchanged.email == "a@b.com"
    assert unchanged.username == "anilk"
    assert unchanged.first_name == "Anil"
    # Rejected before allocation
    assert store.current_sequence(db_session) == 1


def test_insert_conflict_consumes_the_sequence_number(db_session, monkeypatch):
    register(db_session)
    # Skip the pre-check so the unique constraint fires at insert time
    monkeypatch.setattr(store, "find_duplicate_field", lambda db, reg: None)
    with pytest.raises(DuplicateKeyError) as info:
        register(db_session, 7, email="a@b.com")
    assert info.value.field == "email"
    assert store.current_sequence(db_session) == 2

    monkeypatch.undo()
    nxt = register(db_session, 8)
    assert nxt.sequence_number == 3


def test_metadata_is_stored_but_not_public(db_session):
    meta = {"ip": "10.0.0.1", "userAgent": "pytest", "clientTimestamp": 1759572000000, "clientRandom": "abc123"}
    player = register(db_session, metadata=meta)
    db_session.expire_all()
    assert json.loads(player.registration_metadata) == meta
    assert player.metadata_dict["clientRandom"] == "abc123"


def test_find_by_any_identifier(db_session):
    player = register(db_session)
    for ident in (player.player_id, player.player_id.lower(), player.user_id, player.id, "anilk"):
        assert store.find_player(db_session, ident).id == player.id
    assert store.find_player(db_session, "IDSC9904102025") is None
    assert store.find_player(db_session, "  ") is None


def test_list_filters_and_paginates(db_session):
    register(db_session, 1, city="Mumbai", state="Maharashtra", role="Batsman")
    register(db_session, 2, city="Pune", state="Maharashtra", role="Bowler")
    register(db_session, 3, firstName="Rahul", lastName="Dravid", role="Batsman")

    players, total = store.list_players(db_session)
    assert total == 3
    assert [p.sequence_number for p in players] == [1, 2, 3]

    players, total = store.list_players(db_session, search="mumBAI")
    assert total == 1 and players[0].city == "Mumbai"

    players, total = store.list_players(db_session, search="dravid")
    assert total == 1 and players[0].first_name == "Rahul"

    players, total = store.list_players(db_session, role="Batsman")
    assert total == 2

    players, total = store.list_players(db_session, state="Maharashtra", role="Bowler")
    assert total == 1 and players[0].city == "Pune"

    players, total = store.list_players(db_session, page=2, limit=2)
    assert total == 3
    assert [p.sequence_number for p in players] == [3]


def test_search_treats_wildcards_literally(db_session):
    register(db_session, 1)
    _, total = store.list_players(db_session, search="%")
    assert total == 0


def test_aggregate_stats(db_session):
    register(db_session, 1, role="Batsman", state="Karnataka")
    register(db_session, 2, role="Batsman", state="Kerala")
    register(db_session, 3, role="Bowler", state="Karnataka", now=datetime(2025, 10, 3, 12, 0))

    stats = store.aggregate_stats(db_session, today=FIXED_NOW.date())
    assert stats["totalCount"] == 3
    assert stats["activeCount"] == 3
    assert stats["currentSequence"] == 3
    assert stats["nextSequenceNumber"] == 4
    assert stats["nextPlayerId"] == "IDSC0404102025"
    assert stats["countsByRole"] == [{"role": "Batsman", "count": 2}, {"role": "Bowler", "count": 1}]
    assert stats["countsByState"] == [{"state": "Karnataka", "count": 2}, {"state": "Kerala", "count": 1}]
    assert stats["countsByDay"] == [{"date": "2025-10-04", "count": 2}, {"date": "2025-10-03", "count": 1}]


def test_stats_limit_states_to_top_ten(db_session):
    for n in range(1, 13):
        register(db_session, n, state=f"State {n:02d}")
    stats = store.aggregate_stats(db_session, today=FIXED_NOW.date())
    assert len(stats["countsByState"]) == 10


def test_login_touches_only_login_fields(db_session):
    player = register(db_session)
    identity = (player.player_id, player.user_id, player.sequence_number)

    found = store.authenticate(db_session, "A@B.com", "secret1")
    store.record_login(db_session, found, now=datetime(2025, 10, 6, 8, 0))
    store.record_login(db_session, found)

    assert found.login_count == 2
    assert found.last_login is not None
    assert (found.player_id, found.user_id, found.sequence_number) == identity


def test_login_rejects_bad_password_and_inactive_accounts(db_session):
    player = register(db_session)
    with pytest.raises(AuthenticationError):
        store.authenticate(db_session, "anilk", "wrong-password")
    with pytest.raises(AuthenticationError):
        store.authenticate(db_session, "nobody", "secret1")

    player.status = "Suspended"
    db_session.commit()
    with pytest.raises(AccountInactiveError):
        store.authenticate(db_session, "anilk", "secret1")
