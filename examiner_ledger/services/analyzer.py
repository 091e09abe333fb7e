"""Examiner activity analysis across one or more games."""

import logging
from typing import AsyncIterator, Iterable, Optional, Union

from examiner_ledger.config import Config
from examiner_ledger.dates import DateRange, parse_date_range
from examiner_ledger.datasources import DataSource
from examiner_ledger.models import (
    AnalysisResult,
    ExaminerSummary,
    FetchFailure,
    Game,
    GameSummary,
    session_status,
)
from . import stats
from .aggregation import AggregateSnapshot, AggregationBuilder
from .games import GameResolver, category_names, resolve_title, split_identifiers
from .identity_cache import IdentityCache
from .pagination import PageSource, PaginatedFetcher, PaginationError

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    One analysis query: its own identity cache, buckets and failures.

    Iterate ``stream()`` to drive the fetch; ``result()`` summarizes the
    state reached so far.
    """

    def __init__(
        self,
        datasource: DataSource,
        games: Union[str, Iterable[str]],
        date_range: DateRange,
        pronoun_filter: Optional[str] = None,
        fetcher: Optional[PaginatedFetcher] = None,
        identity_cache: Optional[IdentityCache] = None,
    ):
        self.datasource = datasource
        self.identifiers = split_identifiers(games)
        self.date_range = date_range
        self.fetcher = fetcher or PaginatedFetcher()
        self.identity_cache = identity_cache or IdentityCache(datasource)
        self.builder = AggregationBuilder(self.identity_cache, pronoun_filter)
        self.games: list[Game] = []
        self.categories: dict[str, str] = {}
        self.failures: list[FetchFailure] = []

    def _verified_runs(self, game: Game) -> PageSource:
        async def fetch_page(offset: int, page_size: int):
            return await self.datasource.fetch_runs_page(
                game.id,
                offset=offset,
                page_size=page_size,
                order_by="verify-date",
                direction="desc",
                status="verified",
            )
        return PageSource(source_id=game.id, fetch_page=fetch_page)

    async def stream(self) -> AsyncIterator[AggregateSnapshot]:
        """
        Fetch every game in turn and yield a snapshot after each batch.

        Games are processed sequentially. A failed page ends the scan of its
        game only; the runs already aggregated are kept.
        """
        games, failures = await GameResolver(self.datasource).resolve_many(self.identifiers)
        self.games = games
        self.failures.extend(failures)
        self.categories = category_names(games)

        for game in games:
            self.identity_cache.seed(game)
            logger.info(f"Fetching verified runs for {game.abbreviation or game.id}")

            try:
                async for batch in self.fetcher.iter_batches(
                    self._verified_runs(game),
                    date_range=self.date_range,
                ):
                    yield await self.builder.add_batch(batch)
            except PaginationError as e:
                self.failures.append(e.to_failure())

    def result(self) -> AnalysisResult:
        snapshot = self.builder.snapshot()
        failures = list(self.failures) + [
            FetchFailure(
                kind="resolution",
                source=examiner_id,
                message=f"User information failed to load for user Id {examiner_id}",
            )
            for examiner_id in self.builder.unresolved
        ]
        start, end = self.date_range.iso_bounds()
        return AnalysisResult(
            title=resolve_title(self.games, ",".join(self.identifiers)),
            games=[GameSummary.from_game(game) for game in self.games],
            startDate=start,
            endDate=end,
            period=self.date_range.describe(),
            totalRuns=snapshot.total_runs,
            examiners=[
                ExaminerSummary.from_examiner(e, stats=stats.summarize(
                    e.runs,
                    total_runs=snapshot.total_runs,
                    date_range=self.date_range,
                    categories=self.categories,
                ))
                for e in snapshot.examiners
            ],
            chart=snapshot.chart,
            categories=dict(self.categories),
            failures=failures,
            status=session_status(snapshot.total_runs > 0, failures),
        )


class AnalyzerService:
    """Service for examiner activity across games."""

    def __init__(self, datasource: DataSource, config: Optional[Config] = None):
        self.datasource = datasource
        self.config = config or Config()

    def open_session(
        self,
        games: Union[str, Iterable[str]],
        date_range: Optional[DateRange] = None,
        pronoun_filter: Optional[str] = None,
    ) -> AnalysisSession:
        return AnalysisSession(
            self.datasource,
            games,
            date_range or parse_date_range(),
            pronoun_filter=pronoun_filter,
            fetcher=PaginatedFetcher.from_config(self.config),
        )

    async def analyze(
        self,
        games: Union[str, Iterable[str]],
        date_range: Optional[DateRange] = None,
        pronoun_filter: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Rank the examiners of the given games by runs verified in a date range.

        Args:
            games: Comma-separated abbreviations/names, or a list of them
            date_range: Range of verify-dates; defaults to the last month
            pronoun_filter: Keep only examiners whose pronouns match

        Returns:
            AnalysisResult with ranked examiners and chart entries
        """
        session = self.open_session(games, date_range, pronoun_filter)
        async for snapshot in session.stream():
            logger.debug(f"{snapshot.total_runs} runs aggregated")
        result = session.result()
        logger.info(
            f"Analysis of {result.title}: {result.totalRuns} runs, "
            f"{len(result.examiners)} examiners, status {result.status}"
        )
        return result
