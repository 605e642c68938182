from __future__ import annotations

import datetime as dt
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

WinnerSide = Literal["home", "away"]


def _numeric_to_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


# Provider ids are stored as strings by some writers and as numbers by others.
IdToken = Annotated[str, BeforeValidator(_numeric_to_str)]


class Participant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[IdToken] = None
    name: Optional[str] = None
    short_name: Optional[str] = Field(default=None, alias="shortName")


class Participants(BaseModel):
    model_config = ConfigDict(extra="ignore")

    home: Participant = Field(default_factory=Participant)
    away: Participant = Field(default_factory=Participant)

    @field_validator("home", "away", mode="before")
    @classmethod
    def _missing_side(cls, value: Any) -> Any:
        return {} if value is None else value


class MatchResult(BaseModel):
    """Result sub-document as written to a corrected match."""

    model_config = ConfigDict(populate_by_name=True)

    winner: WinnerSide
    winner_name: str = Field(alias="winnerName", min_length=1)
    margin: int = Field(ge=0)
    margin_type: str = Field(alias="marginType", min_length=1)
    result_text: str = Field(alias="resultText", min_length=1)
    data_source: str = Field(default="manual", alias="dataSource")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class MatchRecord(BaseModel):
    """Fields of a stored match document that the result fix reads.

    ``result`` stays a loose mapping because inconsistent records (empty or
    half-written results) are exactly the ones that get corrected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    match_id: IdToken = Field(alias="matchId")
    status: Optional[str] = None
    match_ended: Optional[bool] = Field(default=None, alias="matchEnded")
    end_time: Optional[dt.datetime] = Field(default=None, alias="endTime")
    result: Optional[dict[str, Any]] = None
    teams: Participants = Field(default_factory=Participants)

    @field_validator("teams", mode="before")
    @classmethod
    def _missing_teams(cls, value: Any) -> Any:
        return {} if value is None else value


class ResultOverride(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    winner_name: str = Field(min_length=1)
    winner_id: Optional[IdToken] = None
    margin: int = Field(ge=0)
    margin_type: str = Field(default="runs", min_length=1)
    result_text: Optional[str] = None
    source: str = Field(default="manual", min_length=1)

    @field_validator("margin_type", "source")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()

    @field_validator("winner_id", "result_text")
    @classmethod
    def _blank_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        return value
