"""Session-scoped cache resolving examiner ids to display identities."""

import logging
from typing import Optional

from examiner_ledger.datasources import DataSource, DataSourceError
from examiner_ledger.models import PLACEHOLDER_USER, Examiner, Game, User

logger = logging.getLogger(__name__)

BANNED_LABEL = "Banned User"


def placeholder_examiner(label: str, examiner_id: Optional[str] = None) -> Examiner:
    """Examiner backed by the placeholder user, displayed as ``label``."""
    return Examiner(
        id=examiner_id or label,
        name=label,
        color="#000000",
        icon_url=None,
        user=PLACEHOLDER_USER,
    )


def examiner_from_user(user: User) -> Examiner:
    """Wrap a user, taking its display color from the name style."""
    if user.is_banned:
        return placeholder_examiner(BANNED_LABEL, examiner_id=user.id)

    return Examiner(
        id=user.id,
        name=user.name,
        color=user.name_style.display_color,
        icon_url=user.image_uri,
        user=user,
    )


def is_placeholder(examiner: Examiner) -> bool:
    """True when the examiner could not be resolved. Banned users count as resolved."""
    return examiner.user.id == PLACEHOLDER_USER.id and examiner.name != BANNED_LABEL


class IdentityCache:
    """
    Write-once examiner cache for one query session.

    Failed lookups are cached as placeholders too, so every id costs at most
    one remote request per session.
    """

    def __init__(self, datasource: DataSource):
        self.datasource = datasource
        self._entries: dict[str, Examiner] = {}

    def __contains__(self, examiner_id: str) -> bool:
        return examiner_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, examiner_id: str) -> Optional[Examiner]:
        return self._entries.get(examiner_id)

    def seed(self, game: Game) -> int:
        """
        Pre-insert the moderators embedded in a game's roster.

        Existing entries are kept. Returns the number of new entries.
        """
        added = 0
        for moderator in game.moderators:
            if moderator.id not in self._entries:
                self._entries[moderator.id] = examiner_from_user(moderator)
                added += 1
        if added:
            logger.debug(f"Seeded {added} moderators from {game.abbreviation or game.id}")
        return added

    async def resolve(self, examiner_id: str) -> Examiner:
        """
        Resolve an examiner id, hitting the remote service on a miss only.

        Returns:
            The cached examiner; a placeholder named after the raw id when the
            lookup fails or finds nothing
        """
        cached = self._entries.get(examiner_id)
        if cached is not None:
            return cached

        user: Optional[User] = None
        try:
            user = await self.datasource.fetch_user(examiner_id)
        except DataSourceError as e:
            logger.warning(f"User lookup failed for {examiner_id}: {e}")

        if user is None:
            logger.warning(f"Could not resolve user {examiner_id}")
            examiner = placeholder_examiner(examiner_id)
        else:
            examiner = examiner_from_user(user)

        self._entries[examiner_id] = examiner
        return examiner
