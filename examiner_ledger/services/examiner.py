"""Runs examined by a single user."""

import logging
from typing import Optional, Union

from examiner_ledger.config import Config
from examiner_ledger.dates import DateRange, parse_date_range
from examiner_ledger.datasources import DataSource, DataSourceError, RateLimitError
from examiner_ledger.models import (
    ExaminerLookupResult,
    ExaminerSummary,
    FetchFailure,
    session_status,
)
from . import stats
from .display import AnyRun, run_sort_value
from .filters import RunFilter, filter_runs
from .identity_cache import IdentityCache, is_placeholder
from .pagination import PageSource, PaginatedFetcher, PaginationError

logger = logging.getLogger(__name__)

VERIFIER_EMBED = "platform,players,level,category.variables,game"
DEFAULT_MAX_RUNS = 200


def normalize_max_runs(value: Union[int, str, None]) -> int:
    """Parse a run cap; anything missing, invalid or non-positive becomes 200."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_RUNS
    return parsed if parsed > 0 else DEFAULT_MAX_RUNS


class ExaminerService:
    """Service for the runs a user has examined."""

    def __init__(self, datasource: DataSource, config: Optional[Config] = None):
        self.datasource = datasource
        self.config = config or Config()

    def _examined_runs(self, examiner_id: str) -> PageSource:
        async def fetch_page(offset: int, page_size: int):
            return await self.datasource.fetch_runs_by_examiner(
                examiner_id,
                offset=offset,
                page_size=page_size,
                order_by="verify-date",
                direction="desc",
                embed=VERIFIER_EMBED,
            )
        return PageSource(source_id=examiner_id, fetch_page=fetch_page)

    async def lookup(
        self,
        user: str,
        date_range: Optional[DateRange] = None,
        max_runs: Union[int, str, None] = None,
        criteria: Optional[RunFilter] = None,
        fetcher: Optional[PaginatedFetcher] = None,
    ) -> ExaminerLookupResult:
        """
        Collect the runs examined by a user.

        Either bounded by a date range (the default, last month) or, when
        ``max_runs`` is given, the most recent ``max_runs`` runs. An empty
        date-bounded result falls back to the latest page of runs so that
        "nothing in range" can be told apart from "wrong user".

        Args:
            user: User id or name
            date_range: Verify-date range; ignored when ``max_runs`` is given
            max_runs: Run cap; invalid values become 200
            criteria: Filter applied to the returned runs
            fetcher: Paginated fetcher to use; built from config by default

        Returns:
            ExaminerLookupResult; status ``not_found`` when the user does not
            resolve and ``no_data`` when they never examined a run
        """
        fetcher = fetcher or PaginatedFetcher.from_config(self.config)
        examiner = await IdentityCache(self.datasource).resolve(user)
        if is_placeholder(examiner):
            failure = FetchFailure(
                kind="resolution",
                source=user,
                message=f"User information failed to load for user {user}",
            )
            return ExaminerLookupResult(failures=[failure], status="not_found")

        limit: Optional[int] = None
        if max_runs is not None:
            limit = normalize_max_runs(max_runs)
            date_range = None
        elif date_range is None:
            date_range = parse_date_range()

        runs: list[AnyRun] = []
        failures: list[FetchFailure] = []
        try:
            async for batch in fetcher.iter_batches(
                self._examined_runs(examiner.id),
                date_range=date_range,
                limit=limit,
                sort_key=run_sort_value,
                reverse=True,
            ):
                runs.extend(batch)
        except PaginationError as e:
            failures.append(e.to_failure())

        range_invalid = False
        if not runs and date_range is not None and not failures:
            logger.info(f"No runs examined by {examiner.name} in range; showing the latest runs")
            try:
                async with fetcher.limiter.slot(examiner.id):
                    runs = await self.datasource.fetch_runs_by_examiner(
                        examiner.id,
                        offset=0,
                        page_size=fetcher.page_size,
                        order_by="verify-date",
                        direction="desc",
                        embed=VERIFIER_EMBED,
                    )
                range_invalid = bool(runs)
            except DataSourceError as e:
                failures.append(FetchFailure(
                    kind="rate_limit" if isinstance(e, RateLimitError) else "transport",
                    source=examiner.id,
                    offset=0,
                    message=str(e),
                ))

        examiner.runs.extend(runs)
        status = session_status(bool(runs), failures)
        if status == "no_data":
            logger.info(f"User {examiner.name} did not have any examined runs")

        return ExaminerLookupResult(
            examiner=ExaminerSummary.from_examiner(examiner),
            runs=filter_runs(runs, criteria),
            totalRuns=len(runs),
            rangeInvalid=range_invalid,
            stats=stats.summarize(runs, date_range=None if range_invalid else date_range) if runs else None,
            failures=failures,
            status=status,
        )
