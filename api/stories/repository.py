"""
Story-line, story-line view and timeline reads.
"""

from __future__ import annotations

from typing import Any

from aggregation import fetcher
from aggregation.translations import DEFAULT_FIELDS, TranslationSpec
from clusters.repository import CLUSTER_ARTICLES
from core.store import Order, Store, all_of, eq, in_

STORY_LINE_VIEWS = "story_line_view"
TIMELINES = "timelines"
LOCALIZED_TIMELINES = "timelines_int"

LATEST_FIRST = (Order("created_at", descending=True), Order("id", descending=True))

STORY_LINE_TRANSLATIONS = TranslationSpec(
    collection="cluster_article_int",
    foreign_key="cluster_article_id",
    fields=DEFAULT_FIELDS,
)
STORY_LINE_HEADLINE_TRANSLATIONS = TranslationSpec(
    collection="cluster_article_int",
    foreign_key="cluster_article_id",
    fields=("headline",),
)
VIEW_LABEL_TRANSLATIONS = TranslationSpec(
    collection="story_line_view_int",
    foreign_key="story_line_view_id",
    fields=("view",),
)
VIEW_TRANSLATIONS = TranslationSpec(
    collection="story_line_view_int",
    foreign_key="story_line_view_id",
    fields=("headline", "introduction", "content"),
)


async def story_line_page(
    store: Store,
    *,
    cluster_ids: list[Any],
    page: int,
    page_size: int,
) -> tuple[list[dict[str, Any]], int]:
    return await fetcher.fetch_offset_page(
        store,
        CLUSTER_ARTICLES,
        columns=("id", "headline", "image_url", "cluster_id", "created_at"),
        where=in_("cluster_id", cluster_ids),
        order=LATEST_FIRST,
        page=page,
        page_size=page_size,
    )


async def latest_cluster_article(store: Store, cluster_id: str) -> dict[str, Any] | None:
    return await fetcher.fetch_one(
        store,
        CLUSTER_ARTICLES,
        where=eq("cluster_id", cluster_id),
        columns=("id", "headline", "summary", "content", "image_url"),
        order=LATEST_FIRST,
    )


async def story_line_views(store: Store, cluster_id: str) -> list[dict[str, Any]]:
    return await fetcher.fetch_all(
        store,
        STORY_LINE_VIEWS,
        where=eq("cluster_id", cluster_id),
        columns=("id", "view"),
        order=(Order("id"),),
    )


async def get_story_line_view(store: Store, view_id: int) -> dict[str, Any] | None:
    return await fetcher.fetch_one(
        store,
        STORY_LINE_VIEWS,
        where=eq("id", view_id),
        columns=("id", "headline", "introduction", "content"),
    )


async def get_timeline(store: Store, cluster_id: str, *, locale: str | None = None) -> dict[str, Any] | None:
    """
    First timeline record for a cluster: localized when `locale` is given, base otherwise.
    """
    if locale is None:
        return await fetcher.fetch_one(store, TIMELINES, where=eq("cluster_id", cluster_id))
    return await fetcher.fetch_one(
        store,
        LOCALIZED_TIMELINES,
        where=all_of(eq("cluster_id", cluster_id), eq("language_code", locale)),
    )
