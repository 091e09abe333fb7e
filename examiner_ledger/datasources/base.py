"""Abstract base class for data sources."""

from abc import ABC, abstractmethod
from typing import Optional, Union

from examiner_ledger.models import Game, RunPlain, RunWithEmbeds, User

RunRecord = Union[RunPlain, RunWithEmbeds]


class DataSourceError(Exception):
    """
    Raised when the remote service cannot be reached or answers with an error.

    Not-found answers are not errors: lookups return None for them.
    """

    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.message = message
        self.status_code = status_code


class RateLimitError(DataSourceError):
    """Raised when the remote service rejects a request for exceeding its rate limit."""


class DataSource(ABC):
    """
    Abstract interface for leaderboard data sources.

    Implementations perform exactly one remote request per call and never
    retry; pagination and failure policy belong to the services.
    """

    @abstractmethod
    async def fetch_game(self, identifier: str) -> Optional[Game]:
        """
        Resolve a game by abbreviation, id or name.

        Args:
            identifier: Abbreviation or id; identifiers containing a space
                are searched by name and the first hit is used

        Returns:
            Game with categories and moderators embedded, or None if not found
        """
        pass

    @abstractmethod
    async def fetch_runs_page(
        self,
        game_id: str,
        offset: int = 0,
        page_size: int = 200,
        order_by: str = "verify-date",
        direction: str = "desc",
        status: Optional[str] = None,
        embed: Optional[str] = None,
    ) -> list[RunRecord]:
        """
        Retrieve one page of runs for a game.

        Args:
            game_id: Game id
            offset: Index of the first run of the page
            page_size: Maximum number of runs in the page
            order_by: Sort key ('submitted', 'verify-date', 'category', ...)
            direction: 'asc' or 'desc'
            status: Optional status filter ('new', 'verified', 'rejected')
            embed: Optional comma-separated embeds

        Returns:
            Runs of the page; an empty list past the end of the collection
        """
        pass

    @abstractmethod
    async def fetch_runs_by_examiner(
        self,
        examiner_id: str,
        offset: int = 0,
        page_size: int = 200,
        order_by: str = "verify-date",
        direction: str = "desc",
        embed: Optional[str] = None,
    ) -> list[RunRecord]:
        """Retrieve one page of runs examined by a user."""
        pass

    @abstractmethod
    async def fetch_top_runs(self, game_id: str, page_size: int = 200) -> list[tuple[str, RunRecord]]:
        """
        Retrieve the rank-1 run of every leaderboard of a game.

        Returns:
            (category id, run) pairs for leaderboards that have at least one run
        """
        pass

    @abstractmethod
    async def fetch_user(self, user_id: str) -> Optional[User]:
        """
        Retrieve a user by id or name.

        Returns:
            User, or None if not found
        """
        pass

    async def close(self) -> None:
        """
        Clean up resources (e.g., close HTTP sessions).

        Override this if the data source holds resources that need cleanup.
        """
        pass
