"""Examiner (moderator) identity with its accumulated runs."""

from typing import Optional

from pydantic import BaseModel, Field

from .run import Run
from .user import User


class Examiner(BaseModel):
    """
    A resolved examiner identity.

    ``user`` is the placeholder user when the remote lookup failed or the
    account is banned. Apart from appending to ``runs``, instances are not
    modified after creation.
    """
    id: str
    name: str
    color: str = "#000000"
    icon_url: Optional[str] = None
    user: User
    runs: list[Run] = Field(default_factory=list)

    @property
    def run_count(self) -> int:
        return len(self.runs)
