"""Run models in their two embed levels.

The runs endpoint returns bare id references unless the request asked for
embeds, in which case categories, levels, players, platforms and games come
back as nested objects. ``RunPlain`` and ``RunWithEmbeds`` model the two
shapes; both expose ``category_id``, ``primary_t``, ``status`` and
``relevant_date``, which is all the filter pipeline and the aggregation
builder rely on.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .game import Category, Game, Level, Platform, Unresolved, unwrap_embed


class PlayerUser(BaseModel):
    """A registered participant. Plain runs only carry its id."""
    rel: Literal["user"] = "user"
    id: str
    name: Optional[str] = None
    pronouns: Optional[str] = None
    weblink: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_names(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("names"), dict):
            data = dict(data)
            data.setdefault("name", data.pop("names").get("international"))
        return data

    @property
    def display_name(self) -> str:
        return self.name or self.id


class PlayerGuest(BaseModel):
    """A guest participant, known only by name."""
    rel: Literal["guest"] = "guest"
    name: str

    @property
    def display_name(self) -> str:
        return self.name


Player = Annotated[Union[PlayerUser, PlayerGuest], Field(discriminator="rel")]


class RunStatus(BaseModel):
    """Verification state of a run."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: Literal["new", "verified", "rejected"]
    examiner: Optional[str] = Field(default=None, description="User id of the examiner")
    verify_date: Optional[str] = Field(default=None, alias="verify-date")
    reason: Optional[str] = Field(default=None, description="Rejection reason")

    @property
    def is_verified(self) -> bool:
        return self.status == "verified"


class BaseRun(BaseModel):
    """Fields shared by both embed levels."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    weblink: Optional[str] = None
    date: Optional[str] = Field(default=None, description="Date the run was performed (YYYY-MM-DD)")
    submitted: Optional[str] = Field(default=None, description="Submission timestamp (ISO 8601, UTC)")
    status: RunStatus
    primary_t: float = Field(default=0.0, description="Primary duration in seconds")
    values: dict[str, str] = Field(default_factory=dict, description="Variable id -> value id")
    emulated: bool = False
    region: Optional[str] = None
    platform_id: Optional[str] = None
    comment: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_times_and_system(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        times = data.pop("times", None)
        if isinstance(times, dict):
            data.setdefault("primary_t", times.get("primary_t") or 0.0)
        system = data.pop("system", None)
        if isinstance(system, dict):
            data.setdefault("emulated", bool(system.get("emulated")))
            data.setdefault("region", system.get("region"))
            data.setdefault("platform_id", system.get("platform"))
        if data.get("values") is None:
            data["values"] = {}
        return data

    @property
    def examiner_id(self) -> Optional[str]:
        return self.status.examiner

    @property
    def relevant_date(self) -> Optional[str]:
        """Verify-date for verified runs, otherwise the submission time or run date."""
        if self.status.is_verified and self.status.verify_date:
            return self.status.verify_date
        return self.submitted or self.date


class RunPlain(BaseRun):
    """A run fetched without embeds: references are bare ids."""
    kind: Literal["plain"] = "plain"
    game: str
    category: str
    level: Optional[str] = None
    players: list[Player] = Field(default_factory=list)

    @property
    def category_id(self) -> Optional[str]:
        return self.category


class RunWithEmbeds(BaseRun):
    """
    A run fetched with embeds.

    An embed the API returned empty becomes ``Unresolved``; a run without a
    level has ``level=None``.
    """
    kind: Literal["embedded"] = "embedded"
    game: Union[Game, Unresolved, str] = Field(default_factory=Unresolved)
    category: Union[Category, Unresolved] = Field(default_factory=Unresolved)
    level: Optional[Union[Level, Unresolved]] = None
    platform: Optional[Union[Platform, Unresolved]] = None
    players: list[Player] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_embeds(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("category", "game", "platform"):
            if key in data:
                value = unwrap_embed(data[key])
                data[key] = Unresolved() if value is None or value == [] else value
        if "level" in data:
            value = unwrap_embed(data["level"])
            data["level"] = None if value is None or value == [] else value
        if "players" in data:
            players = unwrap_embed(data["players"])
            data["players"] = players if isinstance(players, list) else []
        return data

    @property
    def category_id(self) -> Optional[str]:
        if isinstance(self.category, Category):
            return self.category.id
        return None


Run = Annotated[Union[RunPlain, RunWithEmbeds], Field(discriminator="kind")]


def parse_run(data: dict) -> Union[RunPlain, RunWithEmbeds]:
    """Validate a raw API run, picking the variant from the shape of its category."""
    if isinstance(data.get("category"), dict):
        return RunWithEmbeds.model_validate(data)
    return RunPlain.model_validate(data)
