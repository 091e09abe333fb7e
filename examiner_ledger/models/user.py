"""User models for speedrun.com identities."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ColorPair(BaseModel):
    """A color in light and dark theme variants."""
    light: str = "#000000"
    dark: str = "#ffffff"


class NameStyle(BaseModel):
    """
    Username styling.

    Solid styles carry ``color``; gradient styles carry ``color-from`` and ``color-to``.
    """
    model_config = ConfigDict(populate_by_name=True)

    style: str = "solid"
    color: Optional[ColorPair] = None
    color_from: Optional[ColorPair] = Field(default=None, alias="color-from")
    color_to: Optional[ColorPair] = Field(default=None, alias="color-to")

    @property
    def display_color(self) -> str:
        """Light-mode color; the starting color for gradients."""
        pair = self.color if self.style == "solid" else self.color_from
        return pair.light if pair else "#000000"


class User(BaseModel):
    """
    A registered speedrun.com user.

    The API nests the display name under ``names.international`` and the
    avatar under ``assets.image.uri``; both are flattened on validation.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = "Unknown"
    pronouns: Optional[str] = None
    weblink: Optional[str] = None
    role: str = "user"
    name_style: NameStyle = Field(default_factory=NameStyle, alias="name-style")
    image_uri: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _flatten(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        names = data.pop("names", None)
        if isinstance(names, dict):
            data.setdefault("name", names.get("international") or "Unknown")
        assets = data.pop("assets", None)
        if isinstance(assets, dict):
            image = assets.get("image") or {}
            data.setdefault("image_uri", image.get("uri"))
        return data

    @property
    def is_banned(self) -> bool:
        return self.role == "banned"


# Stand-in identity for examiners whose lookup failed
PLACEHOLDER_USER = User(
    id="unresolved",
    name="Unknown",
    weblink="https://www.speedrun.com",
    name_style=NameStyle(style="solid", color=ColorPair(light="#000000", dark="#ffffff")),
)
