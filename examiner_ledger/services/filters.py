"""Run filter pipeline."""

from typing import Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from examiner_ledger.models import PlayerUser
from .display import AnyRun, category_title, players_to_string

# Category id -> rank-1 run of that category
RecordLookup = dict[str, AnyRun]

# Pronoun criterion that matches participants without pronouns
NO_PRONOUNS = "null"


class RunFilter(BaseModel):
    """
    Optional filter criteria; every unset criterion is a pass-through.
    """
    model_config = ConfigDict(frozen=True)

    category: Optional[str] = Field(default=None, description="Exact category title to keep")
    player: Optional[str] = Field(default=None, description="Exact participant string to keep")
    exclude: Optional[str] = Field(default=None, description="Category title to drop")
    time: Optional[float] = Field(default=None, description="Keep runs strictly faster than this (seconds)")
    pronouns: Optional[str] = Field(default=None, description="Pronoun substring, or 'null' for none")

    def is_empty(self) -> bool:
        return not (self.category or self.player or self.exclude or self.pronouns or self.time)


def pronouns_match(pronouns: Optional[str], wanted: str) -> bool:
    """Substring match, with ``"null"`` matching an empty pronoun list."""
    if pronouns:
        return wanted in pronouns
    return wanted == NO_PRONOUNS


def _still_unbeaten(run: AnyRun, records: RecordLookup) -> bool:
    category_id = run.category_id
    if category_id is None:
        return True
    record = records.get(category_id)
    if record is None:
        return True
    return run.primary_t > record.primary_t


def _has_pronouns(run: AnyRun, wanted: str) -> bool:
    return any(
        pronouns_match(player.pronouns, wanted)
        for player in run.players
        if isinstance(player, PlayerUser)
    )


def filter_runs(
    runs: Sequence[AnyRun],
    criteria: Optional[RunFilter] = None,
    records: Optional[RecordLookup] = None,
    categories: Optional[dict[str, str]] = None,
) -> list[AnyRun]:
    """
    Apply the filter predicates in their fixed order.

    1. record comparison (only with ``records``): keep runs of categories
       without a record and runs slower than the record
    2. category title equals ``criteria.category``
    3. participant string equals ``criteria.player``
    4. category title differs from ``criteria.exclude``
    5. duration strictly below ``criteria.time`` (0 counts as unset)
    6. a registered participant matches ``criteria.pronouns``

    The input sequence is never modified.

    Args:
        runs: Runs to filter
        criteria: Filter criteria; None behaves like an empty filter
        records: Record lookup enabling the record comparison
        categories: Category id -> name table for plain runs

    Returns:
        New list with the runs that pass every active predicate
    """
    if not runs:
        return []

    criteria = criteria or RunFilter()
    result = list(runs)
    if records is None and criteria.is_empty():
        return result

    if records is not None:
        result = [r for r in result if _still_unbeaten(r, records)]
    if criteria.category:
        result = [r for r in result if category_title(r, categories) == criteria.category]
    if criteria.player:
        result = [r for r in result if players_to_string(r.players) == criteria.player]
    if criteria.exclude:
        result = [r for r in result if category_title(r, categories) != criteria.exclude]
    if criteria.time:
        result = [r for r in result if r.primary_t < criteria.time]
    if criteria.pronouns:
        result = [r for r in result if _has_pronouns(r, criteria.pronouns)]

    return result


def filter_game_list(
    runs_by_game: Mapping[str, Sequence[AnyRun]],
    criteria: Optional[RunFilter] = None,
    records: Optional[RecordLookup] = None,
) -> list[str]:
    """
    Games (keys of ``runs_by_game``) that still have runs after filtering.

    At least one game always stays visible: if the filter empties every
    game, all of them are returned.
    """
    games = list(runs_by_game)
    kept = [game for game in games if filter_runs(runs_by_game[game], criteria, records)]
    if not kept:
        return games
    return kept
