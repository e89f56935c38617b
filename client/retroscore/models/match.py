from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from retroscore.utils import parse_iso_datetime, resolve_asset_url


class Team(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    logo_url: Optional[str] = None       # server-relative ("/logos/ars.png") or absolute

    def logo(self, asset_base: str) -> Optional[str]:
        return resolve_asset_url(self.logo_url, asset_base)


class MatchChallenge(BaseModel):
    """One historical match the user has to predict. Replaced wholesale each round."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    match_id: str = Field(min_length=1)
    home_team: Team
    away_team: Team
    match_date: Optional[datetime] = None
    stadium_name: Optional[str] = None

    @field_validator("match_id", mode="before")
    @classmethod
    def _coerce_match_id(cls, value):
        # Backend sends numeric ids; the client only ever echoes them back.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("match_date", mode="before")
    @classmethod
    def _lenient_date(cls, value):
        return parse_iso_datetime(value)

    @property
    def display_date(self) -> str:
        if self.match_date is None:
            return "Date TBD"
        return self.match_date.strftime("%b %d, %Y")
