"""Game, category and level descriptors as returned by the speedrun.com API."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .user import User


def unwrap_embed(value: Any) -> Any:
    """Strip the ``{"data": ...}`` envelope the API puts around embedded resources."""
    if isinstance(value, dict) and set(value) == {"data"}:
        return value["data"]
    return value


class Unresolved(BaseModel):
    """
    Marker for an embedded reference the API returned empty.

    Derived display strings render it as "Unknown".
    """
    kind: Literal["unresolved"] = "unresolved"
    name: str = "Unknown"


class Variable(BaseModel):
    """
    A category variable.

    Only variables flagged as subcategories contribute to a run's category title.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    is_subcategory: bool = Field(default=False, alias="is-subcategory")
    labels: dict[str, str] = Field(default_factory=dict, description="Value id -> label")

    @model_validator(mode="before")
    @classmethod
    def _collect_labels(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("values"), dict):
            data = dict(data)
            values = data.pop("values").get("values") or {}
            data["labels"] = {
                value_id: (entry or {}).get("label", value_id)
                for value_id, entry in values.items()
            }
        return data


class Category(BaseModel):
    """A game category, with its variables when they were embedded."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    weblink: Optional[str] = None
    type: str = Field(default="per-game", description="'per-game' or 'per-level'")
    variables: list[Variable] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_variables(cls, data: Any) -> Any:
        if isinstance(data, dict) and "variables" in data:
            data = dict(data)
            variables = unwrap_embed(data["variables"])
            data["variables"] = variables if isinstance(variables, list) else []
        return data


class Level(BaseModel):
    """An individual level of a game."""
    id: str
    name: str
    weblink: Optional[str] = None


class Platform(BaseModel):
    """Hardware platform a run was performed on."""
    id: str
    name: str
    released: Optional[int] = None


class Game(BaseModel):
    """
    A game with its category table and moderation roster.

    Moderators are only populated when the game was fetched with
    ``embed=moderators``; otherwise the list is empty.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    abbreviation: str = ""
    name: str = "Unknown"
    weblink: Optional[str] = None
    categories: list[Category] = Field(default_factory=list)
    moderators: list[User] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        names = data.pop("names", None)
        if isinstance(names, dict):
            data.setdefault("name", names.get("international") or "Unknown")
        for key in ("categories", "moderators"):
            value = unwrap_embed(data.get(key))
            # Without an embed, moderators is a plain {user_id: role} mapping
            data[key] = value if isinstance(value, list) else []
        return data

    def category_names(self) -> dict[str, str]:
        """Category id -> category name."""
        return {category.id: category.name for category in self.categories}
