"""Per-examiner aggregation of verified runs."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from examiner_ledger.models import ChartEntry, Examiner
from .display import AnyRun
from .filters import pronouns_match
from .identity_cache import IdentityCache, is_placeholder

logger = logging.getLogger(__name__)


@dataclass
class AggregateSnapshot:
    """Examiner buckets ranked by volume, and the matching chart entries."""
    examiners: list[Examiner] = field(default_factory=list)
    chart: list[ChartEntry] = field(default_factory=list)
    total_runs: int = 0


class AggregationBuilder:
    """
    Accumulates verified runs into one bucket per examiner.

    Buckets are created on first sight of an examiner id, through the
    identity cache, and keep that encounter order for tie-breaking.
    """

    def __init__(self, identity_cache: IdentityCache, pronoun_filter: Optional[str] = None):
        self.identity_cache = identity_cache
        self.pronoun_filter = pronoun_filter
        self.unresolved: list[str] = []
        self.total_runs = 0
        self._buckets: dict[str, Examiner] = {}

    async def add_batch(self, runs: Iterable[AnyRun]) -> AggregateSnapshot:
        """Add a batch of runs and return the recomputed snapshot."""
        for run in runs:
            self.total_runs += 1
            examiner_id = run.examiner_id
            if not run.status.is_verified or not examiner_id:
                continue

            bucket = self._buckets.get(examiner_id)
            if bucket is None:
                bucket = await self.identity_cache.resolve(examiner_id)
                if is_placeholder(bucket):
                    self.unresolved.append(examiner_id)
                self._buckets[examiner_id] = bucket
            bucket.runs.append(run)

        return self.snapshot()

    def ranked(self) -> list[Examiner]:
        """Non-empty buckets by run count, descending; ties keep encounter order."""
        ranked = sorted(self._buckets.values(), key=lambda e: -e.run_count)
        ranked = [examiner for examiner in ranked if examiner.run_count > 0]

        if self.pronoun_filter:
            ranked = [
                examiner for examiner in ranked
                if pronouns_match(examiner.user.pronouns, self.pronoun_filter)
            ]
        return ranked

    def snapshot(self) -> AggregateSnapshot:
        examiners = self.ranked()
        chart = [
            ChartEntry(color=examiner.color, value=examiner.run_count, title=examiner.name)
            for examiner in examiners
        ]
        return AggregateSnapshot(examiners=examiners, chart=chart, total_runs=self.total_runs)
