"""Sequential offset pagination over remote run collections."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Optional

from examiner_ledger.config import Config
from examiner_ledger.dates import DateRange, convert_date
from examiner_ledger.datasources import DataSourceError, RateLimitError, RunRecord
from examiner_ledger.models import FetchFailure

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200
DEFAULT_MAX_PAGES = 100

# (offset, page_size) -> one page of runs
PageFetcher = Callable[[int, int], Awaitable[list[RunRecord]]]


class PaginationError(Exception):
    """A page request failed; the scan of ``source_id`` stopped at ``offset``."""

    def __init__(self, source_id: str, offset: int, cause: DataSourceError):
        super().__init__(f"Fetch failed at offset {offset} for {source_id}: {cause}")
        self.source_id = source_id
        self.offset = offset
        self.cause = cause

    def to_failure(self) -> FetchFailure:
        return FetchFailure(
            kind="rate_limit" if isinstance(self.cause, RateLimitError) else "transport",
            source=self.source_id,
            offset=self.offset,
            message=str(self.cause),
        )


class RequestLimiter:
    """Caps the number of outstanding requests per source."""

    def __init__(self, max_in_flight: int = 1):
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self.max_in_flight = max_in_flight
        self._semaphores: dict[str, asyncio.Semaphore] = {}

    @asynccontextmanager
    async def slot(self, source_id: str):
        semaphore = self._semaphores.get(source_id)
        if semaphore is None:
            semaphore = asyncio.Semaphore(self.max_in_flight)
            self._semaphores[source_id] = semaphore
        async with semaphore:
            yield


@dataclass
class PageSource:
    """A remote collection addressed by offset."""
    source_id: str
    fetch_page: PageFetcher


@dataclass
class FetchOutcome:
    """Buffered result of a full scan."""
    runs: list[RunRecord] = field(default_factory=list)
    failure: Optional[FetchFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class PaginatedFetcher:
    """
    Drives offset pagination until the collection is exhausted.

    Pages are requested strictly one after another; the next offset is only
    requested once the previous page has resolved.
    """

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        limiter: Optional[RequestLimiter] = None,
    ):
        self.page_size = page_size
        self.max_pages = max_pages
        self.limiter = limiter or RequestLimiter()

    @classmethod
    def from_config(cls, config: Config) -> "PaginatedFetcher":
        """Fetcher with a fresh per-source request limiter."""
        return cls(
            page_size=config.page_size,
            max_pages=config.max_pages,
            limiter=RequestLimiter(config.max_in_flight),
        )

    async def iter_batches(
        self,
        source: PageSource,
        date_range: Optional[DateRange] = None,
        limit: Optional[int] = None,
        sort_key: Optional[Callable[[RunRecord], float]] = None,
        reverse: bool = False,
    ) -> AsyncIterator[list[RunRecord]]:
        """
        Yield the matching runs of each page as soon as it arrives.

        With ``date_range``, only runs whose relevant date falls in the range
        are kept. Pages with no match are skipped until the first matching
        page has been seen; after that the first page without a match ends
        the scan. A page with no runs at all ends the scan, except for a
        single one before any match.

        With ``sort_key``, the matching runs of each page are sorted (as by
        ``sorted(..., key=sort_key, reverse=reverse)``) before ``limit`` is
        applied.

        With ``limit``, the scan stops once ``limit`` runs were yielded and
        the last batch is truncated to hit it exactly.

        Raises:
            PaginationError: A page request failed. Batches already yielded
                stay valid.
        """
        offset = 0
        pages = 0
        started = False
        empty_streak = 0
        collected = 0
        if limit is not None and limit <= 0:
            return

        while True:
            if pages >= self.max_pages:
                logger.warning(
                    f"Stopping {source.source_id} after {pages} pages (request ceiling reached)"
                )
                return

            async with self.limiter.slot(source.source_id):
                try:
                    page = await source.fetch_page(offset, self.page_size)
                except DataSourceError as e:
                    logger.error(f"Page at offset {offset} failed for {source.source_id}: {e}")
                    raise PaginationError(source.source_id, offset, e) from e

            pages += 1
            logger.debug(f"{source.source_id}: offset {offset} returned {len(page)} runs")
            offset += self.page_size

            if not page:
                empty_streak += 1
                if started or date_range is None or empty_streak > 1:
                    return
                continue
            empty_streak = 0

            if date_range is None:
                matched = list(page)
            else:
                matched = [r for r in page if date_range.contains(convert_date(r.relevant_date))]

            if not matched:
                if started:
                    return
                continue
            started = True

            if sort_key is not None:
                matched.sort(key=sort_key, reverse=reverse)
            if limit is not None:
                matched = matched[: limit - collected]
            collected += len(matched)
            yield matched

            if limit is not None and collected >= limit:
                return

    async def fetch_all(
        self,
        source: PageSource,
        date_range: Optional[DateRange] = None,
        limit: Optional[int] = None,
    ) -> FetchOutcome:
        """
        Collect a full scan into a FetchOutcome.

        On failure the partially collected runs are discarded and the outcome
        carries the failure instead.
        """
        runs: list[RunRecord] = []
        try:
            async for batch in self.iter_batches(source, date_range=date_range, limit=limit):
                runs.extend(batch)
        except PaginationError as e:
            return FetchOutcome(failure=e.to_failure())
        return FetchOutcome(runs=runs)
