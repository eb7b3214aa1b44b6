"""
Team API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from core.store import Store, get_store

from . import service

router = APIRouter()


@router.get("/teams")
async def get_teams(store: Store = Depends(get_store)) -> dict:
    return await service.list_teams(store)


@router.get("/roster")
async def get_roster(
    team_id: int | None = Query(default=None, alias="teamId"),
    page: int | None = None,
    page_size: int | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.roster(store, team_id=team_id, page=page, page_size=page_size)


@router.get("/injuries")
async def get_injuries(
    team: str | None = None,
    cursor: str | None = None,
    limit: int | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.injuries(store, team=team, cursor=cursor, limit=limit)


@router.get("/standings")
async def get_standings(
    season: int | None = None,
    standings_type: str | None = Query(default=None, alias="type"),
    conference: str | None = None,
    division: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.standings(
        store,
        season=season,
        standings_type=standings_type,
        conference=conference,
        division=division,
    )


@router.get("/schedule")
async def get_schedule(
    week: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.schedule(store, week=week)
