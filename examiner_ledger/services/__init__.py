from .identity_cache import IdentityCache
from examiner_ledger.services.pagination import PaginatedFetcher, PageSource, PaginationError, RequestLimiter
from examiner_ledger.services.records import RecordService
from .filters import RunFilter, filter_runs, filter_game_list
from .aggregation import AggregationBuilder
from .games import GameResolver
from .analyzer import AnalyzerService, AnalysisSession
from .queue import QueueService, OrderBy
from .examiner import ExaminerService

__all__ = [
    "IdentityCache",
    "PaginatedFetcher",
    "PageSource",
    "PaginationError",
    "RequestLimiter",
    "RecordService",
    "RunFilter",
    "filter_runs",
    "filter_game_list",
    "AggregationBuilder",
    "GameResolver",
    "AnalyzerService",
    "AnalysisSession",
    "QueueService",
    "OrderBy",
    "ExaminerService",
]
