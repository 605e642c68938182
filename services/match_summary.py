from __future__ import annotations

from typing import Any

from schemas.matches import MatchRecord
from services.record_corrector import COMPLETED_STATUS

RESULT_REQUIRED_FIELDS = ("winner", "winnerName", "resultText")


def _display(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    return str(value)


def summarize_match(record: MatchRecord) -> list[str]:
    home = record.teams.home
    away = record.teams.away
    result = record.result or {}
    return [
        f"Match ID: {record.match_id}",
        f"Status: {_display(record.status)}",
        f"Match Ended: {_display(record.match_ended)}",
        f"Teams: {_display(home.name)} (id={_display(home.id)}) vs {_display(away.name)} (id={_display(away.id)})",
        f"End Time: {record.end_time.isoformat() if record.end_time else 'Not set'}",
        f"Result: {_display(result.get('resultText'))}",
    ]


def _winner_name_matches_a_side(record: MatchRecord, winner_name: str) -> bool:
    token = winner_name.strip().lower()
    for participant in (record.teams.home, record.teams.away):
        name = (participant.name or "").strip().lower()
        if name and (token in name or name in token):
            return True
    return False


def consistency_problems(record: MatchRecord) -> list[str]:
    """List the ways a stored match breaks the completed/ended/result invariant."""
    problems: list[str] = []
    status = (record.status or "").strip().lower()
    result = record.result or {}
    completed = status == COMPLETED_STATUS

    if completed and record.match_ended is not True:
        problems.append("status is completed but matchEnded is not true")
    if record.match_ended is True and not completed:
        problems.append(f"matchEnded is true but status is {_display(record.status)}")

    missing = [field for field in RESULT_REQUIRED_FIELDS if result.get(field) in (None, "")]
    if completed and missing:
        problems.append(f"status is completed but result is missing {', '.join(missing)}")

    if result.get("winner") not in (None, "", "home", "away"):
        problems.append(f"result winner has unexpected side {result.get('winner')!r}")

    winner_name = result.get("winnerName")
    if isinstance(winner_name, str) and winner_name.strip() and not _winner_name_matches_a_side(record, winner_name):
        problems.append(f"result winnerName {winner_name!r} matches neither team")

    return problems
