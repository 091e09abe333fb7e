"""API routes for the examiner ledger service."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from examiner_ledger.config import Config
from examiner_ledger.dates import DateRange, parse_date_range, relative_start
from examiner_ledger.datasources import DataSource
from examiner_ledger.models import (
    AnalysisResult,
    QueueResult,
    ExaminerLookupResult,
)
from examiner_ledger.services import (
    AnalyzerService,
    QueueService,
    ExaminerService,
    RunFilter,
)
from .dependencies import get_config, get_datasource

router = APIRouter(prefix="/v1")


def _date_range(
    startDate: Optional[str],
    endDate: Optional[str],
    period: Optional[str] = None,
) -> DateRange:
    date_range = parse_date_range(startDate, endDate)
    if period:
        date_range = DateRange(start=relative_start(period, date_range.end), end=date_range.end)
    return date_range


@router.get("/analysis", response_model=AnalysisResult)
async def get_analysis(
    games: str = Query(
        ...,
        description="Comma-separated game abbreviations or names",
        example="sms,smo"
    ),
    startDate: Optional[str] = Query(
        None,
        description="Start date (YYYY-MM-DD), defaults to one month ago",
        example="2024-01-01"
    ),
    endDate: Optional[str] = Query(
        None,
        description="End date (YYYY-MM-DD, inclusive), defaults to today",
        example="2024-01-31"
    ),
    period: Optional[str] = Query(
        None,
        description="Shorthand start: lastday, lastweek, lastmonth, thisday, thisweek, thismonth",
    ),
    pronouns: Optional[str] = Query(
        None,
        description="Keep only examiners whose pronouns contain this value ('null' for none)"
    ),
    datasource: DataSource = Depends(get_datasource),
    config: Config = Depends(get_config),
) -> AnalysisResult:
    """
    Rank the moderators of one or more games by runs verified in a date range.

    Returns: examiners, chart entries, totalRuns, failures, status
    """
    service = AnalyzerService(datasource, config)
    return await service.analyze(
        games=games,
        date_range=_date_range(startDate, endDate, period),
        pronoun_filter=pronouns,
    )


@router.get("/queue", response_model=QueueResult)
async def get_queue(
    games: str = Query(
        ...,
        description="Comma-separated game abbreviations or names",
        example="sms"
    ),
    orderby: Optional[str] = Query(
        None,
        description="Sort key: submitted, date, category, level, platform, region, emulated, game, status, verify-date",
        example="submitted"
    ),
    records: bool = Query(
        False,
        description="Only show runs slower than the current record of their category"
    ),
    category: Optional[str] = Query(None, description="Category title to keep"),
    userFilter: Optional[str] = Query(None, description="Exact participant string to keep"),
    exclude: Optional[str] = Query(None, description="Category title to drop"),
    time: Optional[float] = Query(None, description="Keep runs faster than this many seconds"),
    pronouns: Optional[str] = Query(None, description="Participant pronoun filter ('null' for none)"),
    datasource: DataSource = Depends(get_datasource),
    config: Config = Depends(get_config),
) -> QueueResult:
    """
    Get the pending verification queue of one or more games.

    Returns: games with their filtered runs, failures, status
    """
    criteria = RunFilter(
        category=category,
        player=userFilter,
        exclude=exclude,
        time=time,
        pronouns=pronouns,
    )
    service = QueueService(datasource, config)
    return await service.get_queue(
        games=games,
        order_by=orderby,
        records=records,
        criteria=criteria,
    )


@router.get("/examiners/{user}", response_model=ExaminerLookupResult)
async def get_examiner(
    user: str,
    startDate: Optional[str] = Query(
        None,
        description="Start date (YYYY-MM-DD), defaults to one month ago"
    ),
    endDate: Optional[str] = Query(
        None,
        description="End date (YYYY-MM-DD, inclusive), defaults to today"
    ),
    max: Optional[str] = Query(
        None,
        description="Return the latest N examined runs instead of a date range",
        example="200"
    ),
    category: Optional[str] = Query(None, description="Category title to keep"),
    userFilter: Optional[str] = Query(None, description="Exact participant string to keep"),
    exclude: Optional[str] = Query(None, description="Category title to drop"),
    time: Optional[float] = Query(None, description="Keep runs faster than this many seconds"),
    pronouns: Optional[str] = Query(None, description="Participant pronoun filter ('null' for none)"),
    datasource: DataSource = Depends(get_datasource),
    config: Config = Depends(get_config),
) -> ExaminerLookupResult:
    """
    Get the runs examined by a user.

    Returns: examiner, runs, stats, rangeInvalid, failures, status
    """
    criteria = RunFilter(
        category=category,
        player=userFilter,
        exclude=exclude,
        time=time,
        pronouns=pronouns,
    )
    service = ExaminerService(datasource, config)
    return await service.lookup(
        user=user,
        date_range=None if max is not None else _date_range(startDate, endDate),
        max_runs=max,
        criteria=criteria,
    )
