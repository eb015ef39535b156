"""
Plain-text registration summary offered to players after signing up.
Rendered from the same fields the register endpoint returns.
"""

from datetime import datetime
from typing import Any, Mapping

from player_registry.core.identifiers import split_player_id

SYSTEM_NAME = "IDSC Cricket Registration v2.0"
RULE = "=" * 38


def render_registration_summary(data: Mapping[str, Any], generated_at: datetime | None = None) -> str:
    """
    Render the downloadable details text.
    `data` uses wire names: fullName, playerId, userId, sequenceNumber, email,
    phone, city, state, role, registrationDate.
    """
    generated_at = generated_at or datetime.now()
    player_id = data["playerId"]
    prefix, sequence_digits, date_part = split_player_id(player_id)
    registration_date = data.get("registrationDate")
    if isinstance(registration_date, datetime):
        registration_date = registration_date.isoformat()

    lines = [
        "IDSC Cricket Player Registration Details",
        RULE,
        "",
        "Player Information:",
        f"- Full Name: {data['fullName']}",
        f"- Player ID: {player_id}",
        f"- User ID: {data['userId']}",
        f"- Sequence Number: {data['sequenceNumber']}",
        f"- Email: {data['email']}",
        f"- Phone: {data['phone']}",
        f"- Location: {data['city']}, {data['state']}",
        f"- Role: {data.get('role') or '-'}",
        f"- Registration Date: {registration_date}",
        "",
        "ID Format Explanation:",
        "- Player ID Format: prefix + sequence number + ddmmyyyy",
        f'- Your Player ID "{player_id}" breakdown:',
        f"  * {prefix} = IDSC Cricket prefix",
        f"  * {sequence_digits} = You are player number {data['sequenceNumber']}",
        f"  * {date_part} = Registration date",
        "",
        "Important Notes:",
        f"- Your Player ID ({player_id}) is your public identification for tournaments and events",
        f"- Your User ID ({data['userId']}) is used internally for secure data management",
        "- Both IDs are unique and permanently linked to your account",
        "- Player ID cannot be changed once assigned",
        "",
        f"Generated on: {generated_at:%d/%m/%Y, %H:%M:%S}",
        f"System: {SYSTEM_NAME}",
        "",
        RULE,
    ]
    return "\n".join(lines) + "\n"
