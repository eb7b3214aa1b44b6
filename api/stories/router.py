"""
Story-line API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from core.store import Store, get_store

from . import service

router = APIRouter()


@router.get("/story_lines")
async def get_story_lines(
    language_code: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.story_lines(store, language_code=language_code, page=page, page_size=page_size)


@router.get("/story_lines_by_id")
async def get_story_line(
    cluster_id: str | None = None,
    language_code: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.story_line_by_id(store, cluster_id=cluster_id, language_code=language_code)


@router.get("/story_line_view_by_id")
async def get_story_line_view(
    view_id: str | None = Query(default=None, alias="story_line_view_id"),
    language_code: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.story_line_view_by_id(store, view_id=view_id, language_code=language_code)


@router.get("/timeline_by_cluster_id")
async def get_timeline(
    cluster_id: str | None = None,
    language_code: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.timeline_by_cluster_id(store, cluster_id=cluster_id, language_code=language_code)
