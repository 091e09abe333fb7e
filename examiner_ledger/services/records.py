"""Record cross-reference: rank-1 run per category."""

import logging
from typing import Iterable, Optional

from examiner_ledger.datasources import DataSource, DataSourceError
from examiner_ledger.models import FetchFailure, Game
from .filters import RecordLookup

logger = logging.getLogger(__name__)


class RecordService:
    """Builds category -> record lookups for record-mode filtering."""

    def __init__(self, datasource: DataSource, page_size: int = 200):
        self.datasource = datasource
        self.page_size = page_size

    async def build_lookup(self, game: Game) -> Optional[RecordLookup]:
        """
        Fetch the current record of every category of a game.

        Returns:
            Category id -> record run, or None when the records could not be
            fetched (record filtering is then skipped for this game)
        """
        try:
            top_runs = await self.datasource.fetch_top_runs(game.id, self.page_size)
        except DataSourceError as e:
            logger.warning(f"Record information failed to load for {game.abbreviation or game.id}: {e}")
            return None

        lookup: RecordLookup = {}
        for category_id, run in top_runs:
            # Level leaderboards share their category id; the last one listed wins
            lookup[category_id] = run
        logger.info(f"Loaded {len(lookup)} records for {game.abbreviation or game.id}")
        return lookup

    async def build_lookups(
        self,
        games: Iterable[Game],
    ) -> tuple[dict[str, RecordLookup], list[FetchFailure]]:
        """
        Build one lookup per game, sequentially.

        Returns:
            (game id -> lookup for the games that succeeded, failures)
        """
        lookups: dict[str, RecordLookup] = {}
        failures: list[FetchFailure] = []
        for game in games:
            lookup = await self.build_lookup(game)
            if lookup is None:
                failures.append(FetchFailure(
                    kind="transport",
                    source=game.id,
                    message=f"Record information for game {game.abbreviation or game.id} failed to load",
                ))
                continue
            lookups[game.id] = lookup
        return lookups, failures
