"""
Article API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from core.store import Store, get_store

from . import schemas, service

router = APIRouter()


@router.get("/articlePreviews")
async def get_article_previews(
    cursor: str | None = None,
    limit: int | None = None,
    team: str | None = Query(default=None, alias="teamId"),
    store: Store = Depends(get_store),
) -> dict:
    return await service.article_previews(store, cursor=cursor, limit=limit, team=team)


@router.get("/articleDetail")
async def get_article_detail(
    article_id: str | None = Query(default=None, alias="id"),
    store: Store = Depends(get_store),
) -> dict:
    return await service.article_detail(store, article_id=article_id)


@router.post("/relatedArticles")
async def post_related_articles(
    request: schemas.RelatedArticlesRequest,
    store: Store = Depends(get_store),
) -> dict:
    return await service.related_articles(store, source_article_id=request.sourceArticleId)
