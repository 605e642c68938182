from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, OperationFailure

from schemas.matches import MatchRecord, MatchResult, Participant, Participants, ResultOverride, WinnerSide

logger = logging.getLogger(__name__)

COMPLETED_STATUS = "completed"


class RecordCorrectionError(RuntimeError):
    pass


class RecordNotFoundError(RecordCorrectionError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"No match found with matchId={record_id}")
        self.record_id = record_id


class ResultValidationError(RecordCorrectionError):
    pass


class MatchDocumentError(RecordCorrectionError):
    pass


class StoreConnectionError(RecordCorrectionError):
    pass


class WriteRaceAnomalyError(RecordCorrectionError):
    def __init__(self, record_id: str) -> None:
        super().__init__(
            f"Match matchId={record_id} was found but the update matched no document; "
            "it was removed or re-keyed between read and write."
        )
        self.record_id = record_id


@dataclass(frozen=True)
class WinnerPolicy:
    target_name: str
    target_id: Optional[str] = None

    @classmethod
    def from_override(cls, override: ResultOverride) -> "WinnerPolicy":
        return cls(target_name=override.winner_name, target_id=override.winner_id)


@dataclass(frozen=True)
class CorrectionReport:
    record_id: str
    found: bool
    matched_count: int
    modified_count: int
    previous_status: Optional[str]
    new_status: str
    result: MatchResult

    @property
    def changed(self) -> bool:
        return self.modified_count > 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "found": self.found,
            "matched_count": self.matched_count,
            "modified_count": self.modified_count,
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "result": self.result.to_document(),
        }


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _error_summary(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(token) for token in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def parse_override(payload: ResultOverride | Mapping[str, Any]) -> ResultOverride:
    if isinstance(payload, ResultOverride):
        return payload
    try:
        return ResultOverride.model_validate(dict(payload))
    except ValidationError as exc:
        raise ResultValidationError(f"Invalid result override: {_error_summary(exc)}") from exc


def parse_match_document(document: Mapping[str, Any]) -> MatchRecord:
    try:
        return MatchRecord.model_validate(dict(document))
    except ValidationError as exc:
        raise MatchDocumentError(f"Stored match document is malformed: {_error_summary(exc)}") from exc


def _participant_matches(participant: Participant, policy: WinnerPolicy) -> bool:
    target_name = (policy.target_name or "").strip().lower()
    name = (participant.name or "").strip().lower()
    if target_name and name and target_name in name:
        return True

    if participant.id is None:
        return False
    # Without an explicit id the lowercased target name doubles as the id slug.
    target_id = policy.target_id if policy.target_id is not None else target_name
    return bool(target_id) and str(participant.id) == str(target_id)


def resolve_winner_side(teams: Participants, policy: WinnerPolicy) -> WinnerSide:
    """Pick the winning side by name substring or exact id match.

    Always answers: an away match wins, anything else is ``home``. An
    unmatched target is logged because it usually means a spelling the
    caller did not anticipate.
    """
    if _participant_matches(teams.away, policy):
        return "away"
    if not _participant_matches(teams.home, policy):
        logger.warning(
            "Winner %r (id=%s) matched neither %r nor %r; defaulting to home.",
            policy.target_name,
            policy.target_id,
            teams.home.name,
            teams.away.name,
        )
    return "home"


def build_result_text(winner_name: str, margin: int, margin_type: str) -> str:
    unit = (margin_type or "").strip().lower() or "runs"
    if margin == 1 and unit.endswith("s"):
        unit = unit[:-1]
    return f"{winner_name} won by {margin} {unit}"


def build_result(override: ResultOverride, side: WinnerSide) -> MatchResult:
    result_text = override.result_text or build_result_text(override.winner_name, override.margin, override.margin_type)
    return MatchResult(
        winner=side,
        winner_name=override.winner_name,
        margin=override.margin,
        margin_type=override.margin_type,
        result_text=result_text,
        data_source=override.source,
    )


def completion_update(result: MatchResult, now: dt.datetime) -> list[dict[str, Any]]:
    # Pipeline form so an existing endTime is kept server-side, independent of the read.
    return [
        {
            "$set": {
                "status": COMPLETED_STATUS,
                "matchEnded": True,
                "endTime": {"$ifNull": ["$endTime", now]},
                "result": {"$literal": result.to_document()},
            }
        }
    ]


class RecordCorrector:
    def __init__(self, collection: Collection, *, clock: Callable[[], dt.datetime] = _utcnow) -> None:
        self._collection = collection
        self._clock = clock

    def fetch(self, record_id: str) -> MatchRecord:
        record_id = _require_record_id(record_id)
        try:
            document = self._collection.find_one({"matchId": record_id})
        except (ConnectionFailure, OperationFailure) as exc:
            raise StoreConnectionError(f"Lookup of matchId={record_id} failed: {exc}") from exc
        if document is None:
            raise RecordNotFoundError(record_id)
        return parse_match_document(document)

    def correct(
        self,
        record_id: str,
        override: ResultOverride | Mapping[str, Any],
        policy: Optional[WinnerPolicy] = None,
    ) -> CorrectionReport:
        record_id = _require_record_id(record_id)
        override = parse_override(override)
        record = self.fetch(record_id)
        logger.info(
            "Current state for %s: status=%s matchEnded=%s teams=%s vs %s",
            record_id,
            record.status,
            record.match_ended,
            record.teams.home.name,
            record.teams.away.name,
        )

        side = resolve_winner_side(record.teams, policy or WinnerPolicy.from_override(override))
        result = build_result(override, side)

        try:
            update = self._collection.update_one({"matchId": record_id}, completion_update(result, self._clock()))
        except (ConnectionFailure, OperationFailure) as exc:
            raise StoreConnectionError(f"Update of matchId={record_id} failed: {exc}") from exc

        if update.matched_count == 0:
            raise WriteRaceAnomalyError(record_id)

        report = CorrectionReport(
            record_id=record_id,
            found=True,
            matched_count=int(update.matched_count),
            modified_count=int(update.modified_count),
            previous_status=record.status,
            new_status=COMPLETED_STATUS,
            result=result,
        )
        if not report.changed:
            logger.info("Match %s already held the corrected values; nothing modified.", record_id)
        return report


def _require_record_id(record_id: Any) -> str:
    token = "" if record_id is None else str(record_id).strip()
    if not token:
        raise ResultValidationError("Record id is required.")
    return token
