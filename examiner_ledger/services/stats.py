"""Statistics over the runs of one examiner."""

from collections import Counter
from typing import Optional, Sequence

from examiner_ledger.dates import DateRange
from examiner_ledger.models import ExaminerStats, RunWithEmbeds
from .display import AnyRun, category_title, format_duration, game_to_string, run_sort_value, status_to_string


def share_percent(count: int, total: int) -> Optional[str]:
    if total <= 0:
        return None
    return f"{count / total * 100:.2f}%"


def average_per_day(count: int, date_range: DateRange) -> str:
    days = max(date_range.days, 1)
    return f"{count / days:.2f}"


def last_examined(runs: Sequence[AnyRun]) -> Optional[AnyRun]:
    if not runs:
        return None
    return max(runs, key=run_sort_value)


def most_frequent_category(
    runs: Sequence[AnyRun],
    categories: Optional[dict[str, str]] = None,
) -> Optional[str]:
    """Most common category title; runs with an embedded game are prefixed with it."""
    if not runs:
        return None

    def label(run: AnyRun) -> str:
        if isinstance(run, RunWithEmbeds) and not isinstance(run.game, str):
            return f"{game_to_string(run)} - {category_title(run)}"
        return category_title(run, categories)

    counts = Counter(label(run) for run in runs)
    return counts.most_common(1)[0][0]


def average_duration(runs: Sequence[AnyRun]) -> Optional[str]:
    if not runs:
        return None
    return format_duration(sum(run.primary_t for run in runs) / len(runs))


def summarize(
    runs: Sequence[AnyRun],
    total_runs: Optional[int] = None,
    date_range: Optional[DateRange] = None,
    categories: Optional[dict[str, str]] = None,
) -> ExaminerStats:
    """
    Build the statistics panel for an examiner.

    Args:
        runs: Runs examined by the examiner
        total_runs: All runs in the session, for the share percentage
        date_range: Session range, for the per-day average
        categories: Category id -> name table for plain runs
    """
    latest = last_examined(runs)
    return ExaminerStats(
        runsExamined=len(runs),
        sharePercent=share_percent(len(runs), total_runs) if total_runs is not None else None,
        averagePerDay=average_per_day(len(runs), date_range) if date_range else None,
        lastExamined=status_to_string(latest.status) if latest else None,
        mostFrequentCategory=most_frequent_category(runs, categories),
        averageDuration=average_duration(runs),
    )
