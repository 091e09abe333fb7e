"""Derived display strings for runs.

None of these raise on unresolved references; they render them as "Unknown".
"""

from typing import Iterable, Optional, Union

from examiner_ledger.dates import convert_date
from examiner_ledger.models import (
    Category,
    Game,
    Level,
    Platform,
    Player,
    RunPlain,
    RunStatus,
    RunWithEmbeds,
)

UNKNOWN = "Unknown"

AnyRun = Union[RunPlain, RunWithEmbeds]


def category_name(category_id: str, categories: Optional[dict[str, str]] = None) -> str:
    """Look a category name up in an id -> name table."""
    if categories:
        name = categories.get(category_id)
        if name:
            return name
    return f"ID: {category_id}"


def category_title(run: AnyRun, categories: Optional[dict[str, str]] = None) -> str:
    """
    Canonical category title of a run.

    Level name (if any), category name, then the label of every subcategory
    variable the run has a value for: ``"Level: Category - Label"``. Plain
    runs only carry a category id, which is looked up in ``categories``.
    """
    if isinstance(run, RunPlain):
        return category_name(run.category, categories)

    title = ""
    if isinstance(run.level, Level):
        title += f"{run.level.name}: "
    if not isinstance(run.category, Category):
        return title + UNKNOWN

    title += run.category.name
    for variable in run.category.variables:
        if variable.is_subcategory and variable.id in run.values:
            label = variable.labels.get(run.values[variable.id], UNKNOWN)
            title += f" - {label}"
    return title


def players_to_string(players: Iterable[Player]) -> str:
    """Comma-joined participant names, in run order."""
    return ", ".join(player.display_name for player in players)


def game_to_string(run: AnyRun) -> str:
    """Upper-cased abbreviation of the run's embedded game."""
    if isinstance(run, RunWithEmbeds) and isinstance(run.game, Game) and run.game.abbreviation:
        return run.game.abbreviation.upper()
    return UNKNOWN


def platform_to_string(run: AnyRun) -> str:
    if isinstance(run, RunWithEmbeds) and isinstance(run.platform, Platform):
        return run.platform.name
    return "N/A"


def status_to_string(status: RunStatus) -> str:
    if status.is_verified:
        if status.verify_date:
            return convert_date(status.verify_date).astimezone().date().isoformat()
        return "Verified"
    if status.status == "new":
        return "Pending"
    return "Rejected"


def format_duration(seconds: float) -> str:
    """Format a duration as ``hh:mm:ss``, adding milliseconds when present."""
    total_ms = int(round(seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    if millis:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def run_sort_value(run: AnyRun) -> float:
    """Timestamp to sort examined runs by: verify-date when verified, else the run date."""
    if run.status.is_verified and run.status.verify_date:
        return convert_date(run.status.verify_date).timestamp()
    return convert_date(run.date).timestamp()
