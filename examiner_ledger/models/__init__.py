from .user import User, NameStyle, ColorPair, PLACEHOLDER_USER
from .game import (
    Game,
    Category,
    Variable,
    Level,
    Platform,
    Unresolved,
    unwrap_embed,
)
from .run import (
    Run,
    RunPlain,
    RunWithEmbeds,
    RunStatus,
    Player,
    PlayerUser,
    PlayerGuest,
    parse_run,
)
from .examiner import Examiner
from .results import (
    FetchFailure,
    ChartEntry,
    ExaminerSummary,
    ExaminerStats,
    GameSummary,
    AnalysisResult,
    QueueGame,
    QueueResult,
    ExaminerLookupResult,
    SessionStatus,
    session_status,
)

__all__ = [
    "User",
    "NameStyle",
    "ColorPair",
    "PLACEHOLDER_USER",
    "Game",
    "Category",
    "Variable",
    "Level",
    "Platform",
    "Unresolved",
    "unwrap_embed",
    "Run",
    "RunPlain",
    "RunWithEmbeds",
    "RunStatus",
    "Player",
    "PlayerUser",
    "PlayerGuest",
    "parse_run",
    "Examiner",
    "FetchFailure",
    "ChartEntry",
    "ExaminerSummary",
    "ExaminerStats",
    "GameSummary",
    "AnalysisResult",
    "QueueGame",
    "QueueResult",
    "ExaminerLookupResult",
    "SessionStatus",
    "session_status",
]
