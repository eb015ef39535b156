"""
SQLAlchemy models for the sequence counter and registered players.
"""

import json
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Column, Date, DateTime, Index, Integer, String, Text

from player_registry.core.validation import calculate_age, full_name
from .database import Base


class Counter(Base):
    __tablename__ = "counters"

    key = Column(String(64), primary_key=True)  # e.g. "player_sequence"
    value = Column(Integer, nullable=False, default=0)


class Player(Base):
    __tablename__ = "players"
    __table_args__ = (Index("ix_players_city_state", "city", "state"),)

    id = Column(String(36), primary_key=True)  # uuid, internal key

    # Identity: assigned once at creation, never updated
    player_id = Column(String(32), unique=True, nullable=False, index=True)  # IDSC0104102025
    user_id = Column(String(64), unique=True, nullable=False, index=True)  # USER_<millis>_<token>
    sequence_number = Column(Integer, unique=True, nullable=False, index=True)

    # Personal
    first_name = Column(String(50), nullable=False)
    middle_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(16), nullable=False)  # male | female | other

    # Contact
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercased
    phone = Column(String(15), unique=True, nullable=False, index=True)

    # Address
    street_address = Column(String(200), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    postal_code = Column(String(10), nullable=False)
    country = Column(String(50), nullable=False, default="India")

    # Sports profile
    primary_sport = Column(String(30), nullable=False, default="Cricket")
    role = Column(String(32), nullable=False, index=True)
    batting_order_preference = Column(String(32), nullable=False)
    bowling_style = Column(String(16), nullable=False, default="None")
    batting_style = Column(String(32), nullable=False)
    bowling_arm = Column(String(32), nullable=True)

    # Account
    username = Column(String(30), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Metadata
    registration_date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    registration_metadata = Column(Text, nullable=True)  # JSON: ip, userAgent, timestamp, clientTimestamp, clientRandom

    # Status and activity
    status = Column(String(16), nullable=False, default="Active", index=True)  # Active | Inactive | Suspended | Pending
    last_login = Column(DateTime, nullable=True)
    login_count = Column(Integer, nullable=False, default=0)
    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)
    documents_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return full_name(self.first_name, self.last_name, self.middle_name)

    def age_on(self, today: date) -> int:
        return calculate_age(self.date_of_birth, today)

    @property
    def age(self) -> int:
        return self.age_on(date.today())

    @property
    def metadata_dict(self) -> dict[str, Any]:
        if not self.registration_metadata:
            return {}
        return json.loads(self.registration_metadata)

    def to_public_dict(self) -> dict[str, Any]:
        """Wire representation without the password hash or registration metadata."""
        return {
            "id": self.id,
            "playerId": self.player_id,
            "userId": self.user_id,
            "sequenceNumber": self.sequence_number,
            "firstName": self.first_name,
            "middleName": self.middle_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "dateOfBirth": self.date_of_birth.isoformat(),
            "age": self.age,
            "gender": self.gender,
            "email": self.email,
            "phone": self.phone,
            "streetAddress": self.street_address,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "country": self.country,
            "primarySport": self.primary_sport,
            "role": self.role,
            "battingOrderPreference": self.batting_order_preference,
            "bowlingStyle": self.bowling_style,
            "battingStyle": self.batting_style,
            "bowlingArm": self.bowling_arm,
            "username": self.username,
            "registrationDate": self.registration_date.isoformat() if self.registration_date else None,
            "status": self.status,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "loginCount": self.login_count,
            "emailVerified": self.email_verified,
            "phoneVerified": self.phone_verified,
            "documentsVerified": self.documents_verified,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def registration_summary(self) -> dict[str, Any]:
        """Fields echoed back by the register endpoint (and used by the text export)."""
        return {
            "playerId": self.player_id,
            "userId": self.user_id,
            "sequenceNumber": self.sequence_number,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "city": self.city,
            "state": self.state,
            "role": self.role,
            "registrationDate": self.registration_date.isoformat() if self.registration_date else None,
            "status": self.status,
        }
