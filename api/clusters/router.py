"""
Cluster API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.store import Store, get_store

from . import schemas, service

router = APIRouter()


@router.get("/clusterStories")
async def get_cluster_stories(
    cursor: str | None = None,
    limit: int | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.cluster_stories(store, cursor=cursor, limit=limit)


@router.get("/cluster_articles")
async def get_cluster_articles(
    cursor: str | None = None,
    limit: int | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.cluster_articles(store, cursor=cursor, limit=limit)


@router.get("/cluster_infos")
async def get_cluster_infos(
    cursor: str | None = None,
    limit: int | None = None,
    language_code: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.cluster_infos(store, cursor=cursor, limit=limit, language_code=language_code)


@router.get("/cluster_summary_by_id")
async def get_cluster_summary(
    cluster_id: str | None = None,
    language_code: str | None = None,
    store: Store = Depends(get_store),
) -> dict:
    return await service.cluster_summary_by_id(store, cluster_id=cluster_id, language_code=language_code)


@router.post("/cluster_summary_by_id")
async def post_cluster_summary(
    request: schemas.ClusterSummaryRequest,
    store: Store = Depends(get_store),
) -> dict:
    return await service.cluster_summary_by_id(
        store,
        cluster_id=request.cluster_id,
        language_code=request.language_code,
    )
