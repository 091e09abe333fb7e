"""Verification queue: pending runs per game."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from examiner_ledger.config import Config
from examiner_ledger.datasources import DataSource
from examiner_ledger.models import (
    FetchFailure,
    Game,
    GameSummary,
    QueueGame,
    QueueResult,
    session_status,
)
from .display import AnyRun
from .filters import RecordLookup, RunFilter, filter_game_list, filter_runs
from .games import GameResolver, resolve_title, split_identifiers
from .pagination import PageSource, PaginatedFetcher, PaginationError
from .records import RecordService

logger = logging.getLogger(__name__)

QUEUE_EMBED = "platform,players,level,category.variables"


class OrderBy(str, Enum):
    """Sort keys accepted by the runs endpoint."""
    REGION = "region"
    PLATFORM = "platform"
    LEVEL = "level"
    CATEGORY = "category"
    GAME = "game"
    EMULATED = "emulated"
    DATE = "date"
    SUBMITTED = "submitted"
    STATUS = "status"
    VERIFY_DATE = "verify-date"

    @classmethod
    def parse(cls, value: Optional[str]) -> "OrderBy":
        """Parse a sort key, falling back to ``submitted``."""
        try:
            return cls(value)
        except ValueError:
            return cls.SUBMITTED


@dataclass
class QueueSnapshot:
    """Pending runs of every resolved game, plus optional records."""
    identifiers: list[str]
    order_by: OrderBy
    games: list[Game] = field(default_factory=list)
    runs: dict[str, list[AnyRun]] = field(default_factory=dict)
    records: Optional[RecordLookup] = None
    failures: list[FetchFailure] = field(default_factory=list)

    def visible_games(self, criteria: Optional[RunFilter] = None) -> list[Game]:
        """Games that still have runs after filtering; never empty while games exist."""
        by_id = {game.id: game for game in self.games}
        return [by_id[game_id] for game_id in filter_game_list(self.runs, criteria, self.records)]

    def filtered(self, game_id: str, criteria: Optional[RunFilter] = None) -> list[AnyRun]:
        return filter_runs(self.runs.get(game_id, []), criteria, self.records)

    def to_result(self, criteria: Optional[RunFilter] = None) -> QueueResult:
        games = [
            QueueGame(
                game=GameSummary.from_game(game),
                runs=self.filtered(game.id, criteria),
                totalRuns=len(self.runs.get(game.id, [])),
            )
            for game in self.visible_games(criteria)
        ]
        has_data = any(self.runs.values())
        return QueueResult(
            title=resolve_title(self.games, ",".join(self.identifiers)),
            orderBy=self.order_by.value,
            recordMode=self.records is not None,
            games=games,
            failures=list(self.failures),
            status=session_status(has_data, self.failures),
        )


class QueueService:
    """Service for the verification queue of one or more games."""

    def __init__(self, datasource: DataSource, config: Optional[Config] = None):
        self.datasource = datasource
        self.config = config or Config()

    def _pending_runs(self, game: Game, order_by: OrderBy) -> PageSource:
        async def fetch_page(offset: int, page_size: int):
            return await self.datasource.fetch_runs_page(
                game.id,
                offset=offset,
                page_size=page_size,
                order_by=order_by.value,
                direction="asc",
                status="new",
                embed=QUEUE_EMBED,
            )
        return PageSource(source_id=game.id, fetch_page=fetch_page)

    async def load(
        self,
        games: Union[str, Iterable[str]],
        order_by: Union[OrderBy, str, None] = OrderBy.SUBMITTED,
        records: bool = False,
        fetcher: Optional[PaginatedFetcher] = None,
    ) -> QueueSnapshot:
        """
        Fetch the pending runs of every game, sequentially.

        Args:
            games: Comma-separated abbreviations/names, or a list of them
            order_by: Sort key; invalid keys fall back to ``submitted``
            records: Also build the record lookup for record-mode filtering
            fetcher: Paginated fetcher to use; built from config by default

        Returns:
            QueueSnapshot holding runs per game id and failure markers
        """
        order_by = order_by if isinstance(order_by, OrderBy) else OrderBy.parse(order_by)
        fetcher = fetcher or PaginatedFetcher.from_config(self.config)
        identifiers = split_identifiers(games)

        resolved, failures = await GameResolver(self.datasource).resolve_many(identifiers)
        snapshot = QueueSnapshot(
            identifiers=identifiers,
            order_by=order_by,
            games=resolved,
            failures=failures,
        )

        for game in resolved:
            pending = snapshot.runs.setdefault(game.id, [])
            try:
                async for batch in fetcher.iter_batches(self._pending_runs(game, order_by)):
                    pending.extend(batch)
            except PaginationError as e:
                snapshot.failures.append(e.to_failure())
            logger.info(f"Loaded {len(pending)} pending runs for {game.abbreviation or game.id}")

        if records and resolved:
            lookups, record_failures = await RecordService(
                self.datasource, self.config.page_size
            ).build_lookups(resolved)
            snapshot.failures.extend(record_failures)
            merged: RecordLookup = {}
            for lookup in lookups.values():
                merged.update(lookup)
            snapshot.records = merged

        return snapshot

    async def get_queue(
        self,
        games: Union[str, Iterable[str]],
        order_by: Union[OrderBy, str, None] = OrderBy.SUBMITTED,
        records: bool = False,
        criteria: Optional[RunFilter] = None,
    ) -> QueueResult:
        """Load the queue and apply the filter criteria."""
        snapshot = await self.load(games, order_by=order_by, records=records)
        return snapshot.to_result(criteria)
