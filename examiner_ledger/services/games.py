"""Game resolution from user-entered identifiers."""

import logging
from typing import Iterable, Optional, Union

from examiner_ledger.datasources import DataSource, DataSourceError
from examiner_ledger.models import FetchFailure, Game

logger = logging.getLogger(__name__)


def split_identifiers(games: Union[str, Iterable[str]]) -> list[str]:
    """Split a comma-separated game list, dropping blanks."""
    if isinstance(games, str):
        games = games.split(",")
    return [g.strip() for g in games if g.strip()]


def resolve_title(games: list[Game], abbreviation: str) -> str:
    """
    Human-readable title for a comma-separated game list.

    Uses the international names when every identifier resolved; otherwise
    each identifier is replaced by the single game whose abbreviation or id
    matches it, and kept as-is when there is no unique match.
    """
    identifiers = abbreviation.split(",")
    if len(games) == len(identifiers):
        return ", ".join(game.name for game in games)

    names = []
    for identifier in identifiers:
        identifier = identifier.strip()
        matches = [g for g in games if g.abbreviation == identifier or g.id == identifier]
        names.append(matches[0].name if len(matches) == 1 else identifier)
    return ", ".join(names)


def category_names(games: Iterable[Game]) -> dict[str, str]:
    """Category id -> name across several games."""
    table: dict[str, str] = {}
    for game in games:
        table.update(game.category_names())
    return table


class GameResolver:
    """Resolves abbreviations and names to games."""

    def __init__(self, datasource: DataSource):
        self.datasource = datasource

    async def resolve(self, identifier: str) -> Optional[Game]:
        """Resolve one identifier; None when not found or the lookup failed."""
        try:
            game = await self.datasource.fetch_game(identifier)
        except DataSourceError as e:
            logger.warning(f"Game information failed to load for {identifier}: {e}")
            return None
        if game is None:
            logger.info(f"No game found for {identifier}")
        return game

    async def resolve_many(
        self,
        games: Union[str, Iterable[str]],
    ) -> tuple[list[Game], list[FetchFailure]]:
        """
        Resolve a comma-separated list sequentially.

        Returns:
            (resolved games in input order, one failure per unresolved identifier)
        """
        resolved: list[Game] = []
        failures: list[FetchFailure] = []
        for identifier in split_identifiers(games):
            game = await self.resolve(identifier)
            if game is None:
                failures.append(FetchFailure(
                    kind="resolution",
                    source=identifier,
                    message=f"Game information failed to load for game {identifier}",
                ))
                continue
            resolved.append(game)
        return resolved, failures
