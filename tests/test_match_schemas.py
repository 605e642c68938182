from __future__ import annotations

import pytest
from pydantic import ValidationError

from schemas.matches import MatchRecord, ResultOverride
from services.record_corrector import MatchDocumentError, ResultValidationError, parse_match_document, parse_override


def test_match_record_reads_stored_aliases_and_ignores_extra_fields(make_match):
    record = MatchRecord.model_validate(make_match(currentScore={"home": {"runs": 253}}, venue={"name": "Pallekele"}))

    assert record.match_id == "69102"
    assert record.status == "live"
    assert record.match_ended is False
    assert record.teams.away.name == "England"
    assert record.teams.home.short_name == "SL"
    assert record.result is None


def test_match_record_coerces_numeric_ids():
    record = MatchRecord.model_validate({"matchId": 69102, "teams": {"home": {"id": 10, "name": "Ireland"}}})

    assert record.match_id == "69102"
    assert record.teams.home.id == "10"
    assert record.teams.away.name is None


def test_match_record_tolerates_null_teams():
    record = MatchRecord.model_validate({"matchId": "66046", "teams": None, "matchEnded": None})

    assert record.teams.home.name is None
    assert record.match_ended is None


def test_parse_match_document_raises_typed_error_for_malformed_documents():
    with pytest.raises(MatchDocumentError):
        parse_match_document({"status": "live"})
    with pytest.raises(MatchDocumentError):
        parse_match_document({"matchId": "1", "teams": "England v India"})


def test_result_override_normalizes_input():
    override = ResultOverride(winner_name="  England ", margin=11, margin_type="RUNS", result_text="  ", source="API", winner_id="")

    assert override.winner_name == "England"
    assert override.margin_type == "runs"
    assert override.source == "api"
    assert override.result_text is None
    assert override.winner_id is None


def test_result_override_rejects_negative_margin():
    with pytest.raises(ValidationError):
        ResultOverride(winner_name="England", margin=-1)


def test_parse_override_names_the_bad_fields():
    with pytest.raises(ResultValidationError) as excinfo:
        parse_override({"margin": "eleven"})

    message = str(excinfo.value)
    assert "winner_name" in message
    assert "margin" in message
