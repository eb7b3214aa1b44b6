"""
Team, roster, injury, standings and schedule reads.

Collections and their fixed relationships:
- `Rosters.teamId`, `Injuries.team`, `standings.team_id`,
  `Games.home_team` / `Games.away_team` -> `Teams.id`
- `Injuries.player` -> `Player.id`
"""

from __future__ import annotations

from typing import Any

from aggregation import fetcher
from aggregation.cursor import SortField, sort_key
from aggregation.fetcher import FetchResult
from aggregation.references import ReferenceSpec
from core.store import Order, Store, all_of, eq

TEAMS = "Teams"
ROSTERS = "Rosters"
INJURIES = "Injuries"
PLAYERS = "Player"
STANDINGS = "standings"
GAMES = "Games"

ROSTER_COLUMNS = (
    "id",
    "name",
    "number",
    "headshotURL",
    "position",
    "age",
    "height",
    "weight",
    "college",
    "years_exp",
    "teamId",
    "version",
    "status",
)
INJURY_COLUMNS = ("id", "created_at", "team", "date", "status", "description", "version", "player")
GAME_COLUMNS = ("id", "week", "date", "time", "stadium", "home_team", "away_team")

# Injuries page oldest-first by id.
INJURY_SORT_KEY = sort_key(SortField("id"), descending=False)
ROSTER_ORDER = (Order("name"), Order("id"))
STANDINGS_ORDER = (Order("win_percentage", descending=True), Order("points_for", descending=True))

ROSTER_TEAM = ReferenceSpec(name="team", field="teamId", collection=TEAMS, columns=("id", "teamId"))
INJURY_PLAYER = ReferenceSpec(name="player", field="player", collection=PLAYERS, columns=("id", "name", "img_url"))
STANDINGS_TEAM = ReferenceSpec(
    name="team",
    field="team_id",
    collection=TEAMS,
    columns=("id", "fullName", "teamId", "conference", "division"),
)
HOME_TEAM = ReferenceSpec(name="home_team", field="home_team", collection=TEAMS, columns=("id", "teamId"))
AWAY_TEAM = ReferenceSpec(name="away_team", field="away_team", collection=TEAMS, columns=("id", "teamId"))


async def list_teams(store: Store) -> list[dict[str, Any]]:
    return await fetcher.fetch_all(
        store,
        TEAMS,
        columns=("teamId", "fullName", "division", "conference"),
        order=(Order("teamId"),),
    )


async def get_team_by_abbreviation(store: Store, abbreviation: str) -> dict[str, Any] | None:
    return await fetcher.fetch_one(store, TEAMS, where=eq("teamId", abbreviation), columns=("id", "teamId"))


async def latest_roster_version(store: Store, *, team_id: int | None = None) -> int | None:
    row = await fetcher.fetch_one(
        store,
        ROSTERS,
        where=eq("teamId", team_id) if team_id is not None else None,
        columns=("version",),
        order=(Order("version", descending=True),),
    )
    return None if row is None else row["version"]


async def roster_page(
    store: Store,
    *,
    version: int,
    team_id: int | None,
    page: int,
    page_size: int,
) -> tuple[list[dict[str, Any]], int]:
    where = all_of(
        eq("version", version),
        eq("teamId", team_id) if team_id is not None else None,
    )
    return await fetcher.fetch_offset_page(
        store,
        ROSTERS,
        columns=ROSTER_COLUMNS,
        where=where,
        order=ROSTER_ORDER,
        page=page,
        page_size=page_size,
    )


async def injuries_page(
    store: Store,
    *,
    team_id: int,
    after: tuple[Any, ...] | None,
    limit: int,
) -> FetchResult:
    return await fetcher.fetch_page(
        store,
        INJURIES,
        columns=INJURY_COLUMNS,
        where=eq("team", team_id),
        sort_key=INJURY_SORT_KEY,
        after=after,
        limit=limit,
    )


async def standings_for_season(store: Store, season: int) -> list[dict[str, Any]]:
    return await fetcher.fetch_all(store, STANDINGS, where=eq("season", season), order=STANDINGS_ORDER)


async def games_for_week(store: Store, week: int) -> list[dict[str, Any]]:
    return await fetcher.fetch_all(
        store,
        GAMES,
        columns=GAME_COLUMNS,
        where=eq("week", week),
        order=(Order("date"), Order("time"), Order("id")),
    )
