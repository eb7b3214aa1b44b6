"""
Team-centric reads: team list, rosters, injuries, standings and schedule.
"""

from __future__ import annotations

import logging
from typing import Any

from aggregation import assembler, params
from aggregation.references import References, resolve_references
from aggregation.translations import Bundle
from core.errors import BadRequest, NotFound
from core.store import Store

from . import repository

logger = logging.getLogger(__name__)

ROSTER_DEFAULT_PAGE_SIZE = 50
ROSTER_MAX_PAGE_SIZE = 100
INJURIES_DEFAULT_LIMIT = 20
INJURIES_MAX_LIMIT = 100
DEFAULT_SEASON = 2024
STANDINGS_TYPES = ("overall", "conference", "division")

INJURY_STATUS_NAMES = {
    "I.L.": "Injury Reserve",
    "PUP": "Physically Unable to Perform",
    "NFI": "Non-Football Injury",
    "IR": "Injured Reserve",
    "Questionable": "Questionable",
    "Doubtful": "Doubtful",
    "Out": "Out",
    "Probable": "Probable",
    "Sidelined": "Sideline",
}


def format_height(raw: Any) -> str:
    """
    Inches to feet and inches, e.g. 73 -> 6'1". Unparseable values become "".
    """
    if raw is None or raw == "":
        return ""
    try:
        inches = int(str(raw).strip())
    except ValueError:
        return ""
    return f"{inches // 12}'{inches % 12}\""


def format_weight(raw: Any) -> str:
    if not raw:
        return ""
    return f"{raw} lbs"


def injury_status(raw: str | None) -> str:
    if not raw:
        return "Unknown"
    return INJURY_STATUS_NAMES.get(raw, raw)


async def list_teams(store: Store) -> dict[str, Any]:
    rows = await repository.list_teams(store)
    return {"data": rows}


async def resolve_team_id(store: Store, abbreviation: str) -> int:
    team = await repository.get_team_by_abbreviation(store, abbreviation)
    if team is None:
        raise NotFound(f"Team not found: {abbreviation}")
    return int(team["id"])


def _roster_item(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
    return {
        "teamId": refs.value("team", row.get("teamId"), "teamId"),
        "name": row.get("name"),
        "number": row.get("number"),
        "headshotURL": row.get("headshotURL"),
        "position": row.get("position"),
        "age": row.get("age"),
        "height": format_height(row.get("height")),
        "weight": format_weight(row.get("weight")),
        "college": row.get("college"),
        "years_exp": row.get("years_exp"),
    }


async def roster(
    store: Store,
    *,
    team_id: int | None,
    page: int | None,
    page_size: int | None,
) -> dict[str, Any]:
    page = params.page_number(page)
    size = params.page_limit(
        page_size,
        default=ROSTER_DEFAULT_PAGE_SIZE,
        maximum=ROSTER_MAX_PAGE_SIZE,
        name="page_size",
    )

    version = await repository.latest_roster_version(store, team_id=team_id)
    if version is None:
        return assembler.offset_page([], page=page, page_size=size, total=0)

    rows, total = await repository.roster_page(
        store,
        version=version,
        team_id=team_id,
        page=page,
        page_size=size,
    )
    refs = await resolve_references(store, rows, [repository.ROSTER_TEAM])
    items = assembler.assemble(rows, _roster_item, references=refs)
    logger.info("roster_page version=%s page=%s rows=%s total=%s", version, page, len(rows), total)
    return assembler.offset_page(items, page=page, page_size=size, total=total)


async def injuries(
    store: Store,
    *,
    team: str | None,
    cursor: str | None,
    limit: int | None,
) -> dict[str, Any]:
    abbreviation = params.require(team, "team")
    size = params.page_limit(limit, default=INJURIES_DEFAULT_LIMIT, maximum=INJURIES_MAX_LIMIT)
    after = params.decode_cursor(repository.INJURY_SORT_KEY, cursor)

    team_id = await resolve_team_id(store, abbreviation)
    result = await repository.injuries_page(store, team_id=team_id, after=after, limit=size)
    refs = await resolve_references(store, result.rows, [repository.INJURY_PLAYER])

    def shape(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
        return {
            "id": row["id"],
            "created_at": row.get("created_at"),
            "teamId": abbreviation,
            "playerName": refs.value("player", row.get("player"), "name"),
            "playerImgUrl": refs.value("player", row.get("player"), "img_url"),
            "date": row.get("date"),
            "status": injury_status(row.get("status")),
            "description": row.get("description"),
        }

    return assembler.assemble_cursor_page(
        result,
        shape,
        sort_key=repository.INJURY_SORT_KEY,
        references=refs,
    )


def _standing_item(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
    team = refs.get("team", row.get("team_id")) or {}
    return {
        **row,
        "team_name": team.get("fullName") or "Unknown Team",
        "team_abbreviation": team.get("teamId") or "N/A",
        "conference": team.get("conference") or "N/A",
        "division": team.get("division") or "N/A",
    }


async def standings(
    store: Store,
    *,
    season: int | None,
    standings_type: str | None,
    conference: str | None,
    division: str | None,
) -> dict[str, Any]:
    season = DEFAULT_SEASON if season is None else season
    kind = (standings_type or "overall").strip().lower()
    if kind not in STANDINGS_TYPES:
        raise BadRequest("Invalid type parameter")

    conference = (conference or "").strip().upper() or None
    division = (division or "").strip() or None
    if (kind == "conference" and not conference) or (kind == "division" and not (conference and division)):
        raise BadRequest(f"Missing parameters for standings type '{kind}'")

    rows = await repository.standings_for_season(store, season)
    if not rows:
        raise NotFound(f"No standings data found for season {season}")

    refs = await resolve_references(store, rows, [repository.STANDINGS_TEAM])
    items = assembler.assemble(rows, _standing_item, references=refs)

    if kind == "conference":
        items = [item for item in items if item["conference"] == conference]
    elif kind == "division":
        wanted = division.lower()
        items = [
            item
            for item in items
            if item["conference"] == conference and str(item["division"]).lower() == wanted
        ]
    return {"data": items}


def _game_item(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
    return {
        "week": row.get("week"),
        "home_team_name": refs.value("home_team", row.get("home_team"), "teamId"),
        "home_team_id": refs.value("home_team", row.get("home_team"), "id"),
        "away_team_name": refs.value("away_team", row.get("away_team"), "teamId"),
        "away_team_id": refs.value("away_team", row.get("away_team"), "id"),
        "date": row.get("date"),
        "time": row.get("time"),
        "stadium": row.get("stadium"),
    }


async def schedule(store: Store, *, week: str | None) -> dict[str, Any]:
    week_number = params.require_int(week, "week")
    rows = await repository.games_for_week(store, week_number)
    refs = await resolve_references(store, rows, [repository.HOME_TEAM, repository.AWAY_TEAM])
    return {"data": assembler.assemble(rows, _game_item, references=refs)}
