"""Shared fixtures and fakes for examiner_ledger tests."""

from typing import Optional

import pytest

from examiner_ledger.datasources import DataSource, DataSourceError
from examiner_ledger.models import Game, RunPlain, RunWithEmbeds, User, parse_run


def make_user(
    user_id: str,
    name: Optional[str] = None,
    pronouns: Optional[str] = None,
    role: str = "user",
    color: str = "#ff0000",
    gradient_from: Optional[str] = None,
) -> User:
    """User built from an API-shaped payload."""
    if gradient_from:
        style = {
            "style": "gradient",
            "color-from": {"light": gradient_from, "dark": "#000000"},
            "color-to": {"light": "#ffffff", "dark": "#ffffff"},
        }
    else:
        style = {"style": "solid", "color": {"light": color, "dark": "#ffffff"}}
    return User.model_validate({
        "id": user_id,
        "names": {"international": name or user_id, "japanese": None},
        "pronouns": pronouns,
        "weblink": f"https://www.speedrun.com/user/{name or user_id}",
        "role": role,
        "name-style": style,
        "assets": {"image": {"uri": f"https://img.example/{user_id}.png"}},
    })


def make_game(
    game_id: str,
    abbreviation: str,
    name: Optional[str] = None,
    categories: Optional[list[tuple[str, str]]] = None,
    moderators: Optional[list[User]] = None,
) -> Game:
    """Game built from an API-shaped payload with embedded categories and moderators."""
    return Game.model_validate({
        "id": game_id,
        "abbreviation": abbreviation,
        "names": {"international": name or abbreviation.upper()},
        "weblink": f"https://www.speedrun.com/{abbreviation}",
        "categories": {"data": [
            {"id": cid, "name": cname, "type": "per-game"}
            for cid, cname in (categories or [("cat-a", "Any%")])
        ]},
        "moderators": {"data": [
            m.model_dump(by_alias=True) for m in (moderators or [])
        ]},
    })


def make_run(
    run_id: str,
    category: str = "cat-a",
    primary_t: float = 10.0,
    examiner: Optional[str] = "mod-1",
    verify_date: Optional[str] = "2024-03-05T12:00:00Z",
    status: str = "verified",
    game: str = "game-1",
    date: Optional[str] = "2024-03-01",
    submitted: Optional[str] = None,
) -> RunPlain:
    """Plain run built from an API-shaped payload."""
    run_status: dict = {"status": status}
    if status == "verified":
        run_status.update({"examiner": examiner, "verify-date": verify_date})
    elif status == "rejected":
        run_status.update({"examiner": examiner, "reason": "Wrong timing"})
    return parse_run({
        "id": run_id,
        "weblink": f"https://www.speedrun.com/run/{run_id}",
        "game": game,
        "level": None,
        "category": category,
        "date": date,
        "submitted": submitted,
        "status": run_status,
        "players": [{"rel": "user", "id": "player-1", "uri": "https://example"}],
        "times": {"primary": "PT10S", "primary_t": primary_t},
        "system": {"platform": "plat-1", "emulated": False, "region": None},
        "values": {},
    })


def make_embedded_run(
    run_id: str,
    category_name: str = "Any%",
    category_id: str = "cat-a",
    primary_t: float = 10.0,
    level_name: Optional[str] = None,
    variables: Optional[list[dict]] = None,
    values: Optional[dict[str, str]] = None,
    players: Optional[list[dict]] = None,
    status: Optional[dict] = None,
    game: Optional[dict] = None,
    category_unresolved: bool = False,
    submitted: str = "2024-03-02T10:00:00Z",
) -> RunWithEmbeds:
    """Run built from an API-shaped payload with embeds."""
    if category_unresolved:
        category: dict = {"data": []}
    else:
        category = {"data": {
            "id": category_id,
            "name": category_name,
            "weblink": f"https://www.speedrun.com/x#{category_id}",
            "variables": {"data": variables or []},
        }}
    payload = {
        "id": run_id,
        "weblink": f"https://www.speedrun.com/run/{run_id}",
        "level": {"data": {"id": "lvl", "name": level_name}} if level_name else {"data": []},
        "category": category,
        "date": "2024-03-01",
        "submitted": submitted,
        "status": status or {"status": "new"},
        "players": {"data": players if players is not None else [
            {"rel": "guest", "name": "Guest Runner"},
        ]},
        "times": {"primary_t": primary_t},
        "system": {"platform": "plat-1", "emulated": False, "region": None},
        "platform": {"data": {"id": "plat-1", "name": "Nintendo 64"}},
        "values": values or {},
    }
    if game is not None:
        payload["game"] = {"data": game}
    return parse_run(payload)


def page_of(prefix: str, count: int, **kwargs) -> list[RunPlain]:
    """``count`` plain runs with ids ``<prefix>-<n>``."""
    return [make_run(f"{prefix}-{i}", **kwargs) for i in range(count)]


class FakeDataSource(DataSource):
    """
    In-memory data source.

    Pages are given as lists indexed by ``offset // page_size``; offsets past
    the last page return an empty list. ``errors`` maps (source id, offset)
    to the exception raised for that page.
    """

    def __init__(
        self,
        games: Optional[dict[str, Game]] = None,
        users: Optional[dict[str, User]] = None,
        game_pages: Optional[dict[str, list[list]]] = None,
        examiner_pages: Optional[dict[str, list[list]]] = None,
        top_runs: Optional[dict[str, list[tuple]]] = None,
    ):
        self.games = games or {}
        self.users = users or {}
        self.game_pages = game_pages or {}
        self.examiner_pages = examiner_pages or {}
        self.top_runs = top_runs or {}
        self.errors: dict[tuple[str, int], Exception] = {}
        self.failing_users: set[str] = set()
        self.failing_records: set[str] = set()
        self.calls: list[tuple] = []
        self.closed = False

    def _page(self, pages: list[list], source: str, offset: int, page_size: int) -> list:
        error = self.errors.get((source, offset))
        if error is not None:
            raise error
        index = offset // page_size
        return list(pages[index]) if index < len(pages) else []

    async def fetch_game(self, identifier: str) -> Optional[Game]:
        self.calls.append(("game", identifier))
        return self.games.get(identifier)

    async def fetch_runs_page(
        self,
        game_id: str,
        offset: int = 0,
        page_size: int = 200,
        order_by: str = "verify-date",
        direction: str = "desc",
        status: Optional[str] = None,
        embed: Optional[str] = None,
    ) -> list:
        self.calls.append(("runs", game_id, offset, order_by, direction, status, embed))
        return self._page(self.game_pages.get(game_id, []), game_id, offset, page_size)

    async def fetch_runs_by_examiner(
        self,
        examiner_id: str,
        offset: int = 0,
        page_size: int = 200,
        order_by: str = "verify-date",
        direction: str = "desc",
        embed: Optional[str] = None,
    ) -> list:
        self.calls.append(("examined", examiner_id, offset, embed))
        return self._page(self.examiner_pages.get(examiner_id, []), examiner_id, offset, page_size)

    async def fetch_top_runs(self, game_id: str, page_size: int = 200) -> list[tuple]:
        self.calls.append(("records", game_id, page_size))
        if game_id in self.failing_records:
            raise DataSourceError(f"/games/{game_id}/records", "HTTP 503", 503)
        return list(self.top_runs.get(game_id, []))

    async def fetch_user(self, user_id: str) -> Optional[User]:
        self.calls.append(("user", user_id))
        if user_id in self.failing_users:
            raise DataSourceError(f"/users/{user_id}", "timed out")
        return self.users.get(user_id)

    async def close(self) -> None:
        self.closed = True

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def datasource() -> FakeDataSource:
    """Empty fake data source."""
    return FakeDataSource()
