# player_stats.py
# -------------------------------
# Player statistics extraction from SofaScore lineups documents.
# This module deliberately contains NO Flask routes. It focuses purely on
# deterministic functions that are easy to unit test.
#
# SofaScore is not consistent about statistic key names across competitions
# and API revisions, so each output field is read through an ordered list of
# aliases (STAT_RULES) instead of ad-hoc branching.
# -------------------------------

from __future__ import annotations
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Tuple

from models import PlayerStatsRecord
from util.names import names_match

# Teams are checked in this order; the first matching player wins.
TEAM_KEYS: Tuple[str, ...] = ("home", "away")

# output field -> upstream aliases, most preferred first
STAT_RULES: Dict[str, Tuple[str, ...]] = {
    "minutes": ("minutesPlayed",),
    "tackles": ("totalTackle", "tackles"),
    "fouls": ("fouls", "foulCommitted", "totalFoul"),
    "fouls_drawn": ("wasFouled", "foulDrawn", "foulsWon"),
    "shots_total": ("totalShots", "shotsTotal"),
    "shots_on_target": ("onTargetScoringAttempt", "shotsOnTarget"),
    "yellow_cards": ("yellowCards", "yellowCard"),
    "red_cards": ("redCards", "redCard"),
    "rating": ("rating",),
}


def first_present(stats: Mapping[str, Any], aliases: Sequence[str], default: Any = 0) -> Any:
    """Return the value of the first alias present (and not null) in stats."""
    for key in aliases:
        value = stats.get(key)
        if value is not None:
            return value
    return default


def _roster(lineups: Mapping[str, Any], team_key: str) -> Sequence[Any]:
    team = lineups.get(team_key) if isinstance(lineups, Mapping) else None
    if not isinstance(team, Mapping):
        return []
    return team.get("players") or []


def iter_roster_rows(lineups: Mapping[str, Any]) -> Iterator[Tuple[Dict[str, Any], Dict[str, Any]]]:
    """Yield (player, statistics) for home players, then away players."""
    for team_key in TEAM_KEYS:
        for row in _roster(lineups, team_key):
            if not isinstance(row, Mapping):
                continue
            player = row.get("player")
            stats = row.get("statistics")
            # Malformed entries (e.g. "player": "unknown") count as empty.
            if not isinstance(player, Mapping):
                player = {}
            if not isinstance(stats, Mapping):
                stats = {}
            yield player, stats


def build_stats_record(player: Mapping[str, Any], stats: Mapping[str, Any], query_name: str) -> PlayerStatsRecord:
    """Project one roster row onto a PlayerStatsRecord."""
    values = {name: first_present(stats, aliases) for name, aliases in STAT_RULES.items()}
    return PlayerStatsRecord(
        display_name=player.get("name") or query_name,
        player_id=player.get("id"),
        **values,
    )


def find_player_stats(lineups: Mapping[str, Any], query_name: str) -> Optional[PlayerStatsRecord]:
    """
    Locate a player by (fuzzy) name in a lineups document.

    Matching is accent/case-insensitive substring containment in either
    direction, so "joao" finds "João Silva" and "João Silva Jr." finds
    "João Silva". Home is scanned before away, each in document order.

    Note: an empty query normalizes to "" and therefore matches the first
    home player. Likewise a roster row with no name matches any query.

    Returns None when no player matches.
    """
    for player, stats in iter_roster_rows(lineups):
        roster_name = player.get("name") or player.get("shortName") or ""
        if names_match(roster_name, query_name):
            return build_stats_record(player, stats, query_name)
    return None
