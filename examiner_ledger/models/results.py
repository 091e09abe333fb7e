"""Result models returned by the query sessions and the API."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .examiner import Examiner
from .game import Game
from .run import Run

SessionStatus = Literal["complete", "partial", "no_data", "not_found"]


def session_status(has_data: bool, failures: list["FetchFailure"]) -> SessionStatus:
    """Overall status of a session from its data and failure markers."""
    if not has_data:
        return "no_data"
    return "partial" if failures else "complete"


class FetchFailure(BaseModel):
    """
    A named, non-fatal failure attached to a session result.

    ``resolution`` failures concern one game or user identifier; ``transport``
    and ``rate_limit`` failures abort the pagination of one source at ``offset``.
    """
    kind: Literal["resolution", "transport", "rate_limit"]
    source: str = Field(description="Game id, examiner id or raw identifier")
    offset: Optional[int] = Field(default=None, description="Page offset that failed")
    message: str = ""


class ChartEntry(BaseModel):
    """One weighted slice of the examiner chart."""
    color: str
    value: int
    title: str


class ExaminerStats(BaseModel):
    """Per-examiner statistics shown next to an examiner's run list."""
    runsExamined: int
    sharePercent: Optional[str] = Field(default=None, description="Share of all runs, e.g. '12.50%'")
    averagePerDay: Optional[str] = None
    lastExamined: Optional[str] = Field(default=None, description="Verify-date of the latest run")
    mostFrequentCategory: Optional[str] = None
    averageDuration: Optional[str] = None


class ExaminerSummary(BaseModel):
    """Examiner identity without its run list."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    color: str
    iconUrl: Optional[str] = None
    pronouns: Optional[str] = None
    runCount: int = 0
    stats: Optional[ExaminerStats] = Field(default=None, description="Statistics over the session runs")

    @classmethod
    def from_examiner(
        cls,
        examiner: Examiner,
        stats: Optional[ExaminerStats] = None,
    ) -> "ExaminerSummary":
        return cls(
            id=examiner.id,
            name=examiner.name,
            color=examiner.color,
            iconUrl=examiner.icon_url,
            pronouns=examiner.user.pronouns,
            runCount=examiner.run_count,
            stats=stats,
        )


class GameSummary(BaseModel):
    id: str
    abbreviation: str
    name: str
    weblink: Optional[str] = None

    @classmethod
    def from_game(cls, game: Game) -> "GameSummary":
        return cls(
            id=game.id,
            abbreviation=game.abbreviation,
            name=game.name,
            weblink=game.weblink,
        )


class AnalysisResult(BaseModel):
    """Examiner activity across one or more games within a date range."""
    title: str
    games: list[GameSummary] = Field(default_factory=list)
    startDate: str
    endDate: str
    period: str = Field(description="Length of the range, e.g. '30 days'")
    totalRuns: int = 0
    examiners: list[ExaminerSummary] = Field(default_factory=list)
    chart: list[ChartEntry] = Field(default_factory=list)
    categories: dict[str, str] = Field(default_factory=dict)
    failures: list[FetchFailure] = Field(default_factory=list)
    status: SessionStatus = "complete"


class QueueGame(BaseModel):
    """Pending runs of one game after filtering."""
    game: GameSummary
    runs: list[Run] = Field(default_factory=list)
    totalRuns: int = Field(default=0, description="Pending runs before filtering")


class QueueResult(BaseModel):
    """Verification queue for one or more games."""
    title: str
    orderBy: str
    recordMode: bool = False
    games: list[QueueGame] = Field(default_factory=list)
    failures: list[FetchFailure] = Field(default_factory=list)
    status: SessionStatus = "complete"


class ExaminerLookupResult(BaseModel):
    """Runs examined by one user."""
    examiner: Optional[ExaminerSummary] = None
    runs: list[Run] = Field(default_factory=list)
    totalRuns: int = Field(default=0, description="Examined runs before filtering")
    rangeInvalid: bool = Field(default=False, description="True when the date range held no runs and the latest runs are shown instead")
    stats: Optional[ExaminerStats] = None
    failures: list[FetchFailure] = Field(default_factory=list)
    status: SessionStatus = "complete"
