"""speedrun.com REST API (v1) data source implementation."""

import logging
from typing import Any, Optional

import httpx

from examiner_ledger.models import Game, User, parse_run
from .base import DataSource, DataSourceError, RateLimitError, RunRecord

logger = logging.getLogger(__name__)

# API constants
SPEEDRUN_API_URL = "https://www.speedrun.com/api/v1"
MAX_PAGE_SIZE = 200
REQUEST_TIMEOUT = 30.0
GAME_EMBED = "moderators,categories"
# 420 is what speedrun.com answers when throttling
RATE_LIMIT_STATUSES = (420, 429)


class SpeedrunDataSource(DataSource):
    """
    Data source implementation using the speedrun.com public API.

    Limitations:
    - Maximum 200 entries per page
    - Roughly 100 requests per minute per client before throttling
    - Requests are not retried; a failed request raises DataSourceError
    """

    def __init__(
        self,
        api_url: str = SPEEDRUN_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = "examiner-ledger/1.0",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize speedrun.com data source.

        Args:
            api_url: Base URL for the speedrun.com API
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (used to stub the network)
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _make_request(self, endpoint: str, params: Optional[dict] = None) -> Optional[Any]:
        """
        Make a GET request and unwrap the ``data`` envelope.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            The response ``data`` payload, or None on 404
        """
        client = await self._get_client()

        try:
            response = await client.get(endpoint, params=params)
            if response.status_code == 404:
                logger.debug(f"{endpoint} not found")
                return None
            response.raise_for_status()
            return response.json().get("data")

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code in RATE_LIMIT_STATUSES:
                logger.warning(f"Rate limited ({status_code}) on {endpoint}")
                raise RateLimitError(endpoint, "rate limit reached", status_code) from e

            logger.error(f"HTTP error {status_code} for {endpoint}: {e}")
            raise DataSourceError(endpoint, f"HTTP {status_code}", status_code) from e

        except httpx.HTTPError as e:
            logger.error(f"Request to {endpoint} failed: {e!r}")
            raise DataSourceError(endpoint, str(e) or type(e).__name__) from e

        except ValueError as e:
            logger.error(f"Malformed response from {endpoint}: {e}")
            raise DataSourceError(endpoint, "malformed response body") from e

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers={"Accept": "application/json", "User-Agent": self.user_agent},
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def fetch_game(self, identifier: str) -> Optional[Game]:
        """
        Resolve a game by abbreviation, id or name.

        Names (identifiers containing a space) go through the search endpoint.
        """
        if " " in identifier:
            data = await self._make_request(
                "/games",
                {"name": identifier, "embed": GAME_EMBED},
            )
            if not data:
                return None
            return Game.model_validate(data[0])

        data = await self._make_request(f"/games/{identifier}", {"embed": GAME_EMBED})
        return Game.model_validate(data) if data else None

    async def fetch_runs_page(
        self,
        game_id: str,
        offset: int = 0,
        page_size: int = MAX_PAGE_SIZE,
        order_by: str = "verify-date",
        direction: str = "desc",
        status: Optional[str] = None,
        embed: Optional[str] = None,
    ) -> list[RunRecord]:
        """Retrieve one page of runs for a game via the runs endpoint."""
        params = {
            "game": game_id,
            "orderby": order_by,
            "direction": direction,
            "max": min(page_size, MAX_PAGE_SIZE),
            "offset": offset,
        }
        if status:
            params["status"] = status
        if embed:
            params["embed"] = embed

        data = await self._make_request("/runs", params)
        return [parse_run(r) for r in data] if data else []

    async def fetch_runs_by_examiner(
        self,
        examiner_id: str,
        offset: int = 0,
        page_size: int = MAX_PAGE_SIZE,
        order_by: str = "verify-date",
        direction: str = "desc",
        embed: Optional[str] = None,
    ) -> list[RunRecord]:
        """Retrieve one page of runs examined by a user via the runs endpoint."""
        params = {
            "examiner": examiner_id,
            "orderby": order_by,
            "direction": direction,
            "max": min(page_size, MAX_PAGE_SIZE),
            "offset": offset,
        }
        if embed:
            params["embed"] = embed

        data = await self._make_request("/runs", params)
        return [parse_run(r) for r in data] if data else []

    async def fetch_top_runs(self, game_id: str, page_size: int = MAX_PAGE_SIZE) -> list[tuple[str, RunRecord]]:
        """
        Retrieve the rank-1 run of every leaderboard of a game.

        Uses the game records endpoint with ``top=1``.
        """
        data = await self._make_request(
            f"/games/{game_id}/records",
            {"top": 1, "max": min(page_size, MAX_PAGE_SIZE), "skip-empty": "true"},
        )
        if not data:
            return []

        top_runs: list[tuple[str, RunRecord]] = []
        for leaderboard in data:
            ranked = leaderboard.get("runs") or []
            if ranked:
                top_runs.append((leaderboard["category"], parse_run(ranked[0]["run"])))
        return top_runs

    async def fetch_user(self, user_id: str) -> Optional[User]:
        """Retrieve a user by id or name."""
        data = await self._make_request(f"/users/{user_id}")
        return User.model_validate(data) if data else None

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
