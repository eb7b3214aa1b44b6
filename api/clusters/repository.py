"""
Cluster reads.

`clusters.cluster_id` is the uuid every cluster table hangs off:
`cluster_articles`, `cluster_images` and `cluster_summary` all carry it.
Localized rows live in `cluster_article_int` (by `cluster_article_id`) and
`cluster_summary_int` (by `cluster_summary_id`).
"""

from __future__ import annotations

from typing import Any

from aggregation import fetcher
from aggregation.cursor import TIMESTAMP, UUID, SortField, sort_key
from aggregation.fetcher import FetchResult
from aggregation.references import ReferenceSpec
from aggregation.translations import DEFAULT_FIELDS, TranslationSpec
from core.store import Order, Store, eq, in_

CLUSTERS = "clusters"
CLUSTER_STORIES = "ClusterStories"
CLUSTER_ARTICLES = "cluster_articles"
CLUSTER_IMAGES = "cluster_images"
CLUSTER_SUMMARIES = "cluster_summary"
SOURCE_ARTICLES = "SourceArticles"
NEWS_SOURCES = "NewsSource"

CLUSTER_STORY_COLUMNS = (
    "id",
    "cluster_id",
    "headline_english",
    "headline_german",
    "summary_english",
    "summary_german",
    "image1_url",
    "image2_url",
    "image3_url",
    "status",
    "updated_at",
    "source_article_ids",
)
CLUSTER_ARTICLE_COLUMNS = (
    "id",
    "cluster_id",
    "headline",
    "summary",
    "content",
    "image_url",
    "source_article_ids",
    "created_at",
)

CLUSTER_STORY_SORT_KEY = sort_key(SortField("updated_at", TIMESTAMP), SortField("id", UUID))
CLUSTER_ARTICLE_SORT_KEY = sort_key(SortField("created_at", TIMESTAMP), SortField("id", UUID))
CLUSTER_SORT_KEY = sort_key(SortField("updated_at", TIMESTAMP), SortField("cluster_id", UUID))

STORY_SOURCE_ARTICLES = ReferenceSpec(
    name="source_articles",
    field="source_article_ids",
    collection=SOURCE_ARTICLES,
    columns=("id", "source"),
    many=True,
)
ARTICLE_SOURCES = ReferenceSpec(
    name="source_articles",
    field="source_article_ids",
    collection=SOURCE_ARTICLES,
    columns=("id", "created_at", "source"),
    many=True,
    nested=(ReferenceSpec(name="news_sources", field="source", collection=NEWS_SOURCES, columns=("id", "Name")),),
)
CLUSTER_IMAGE = ReferenceSpec(
    name="image",
    field="cluster_id",
    collection=CLUSTER_IMAGES,
    target="cluster_id",
    columns=("cluster_id", "image_url"),
    order=(Order("id"),),
)
CLUSTER_SUMMARY = ReferenceSpec(
    name="summary",
    field="cluster_id",
    collection=CLUSTER_SUMMARIES,
    target="cluster_id",
    columns=("id", "cluster_id", "headline", "content"),
    order=(Order("id"),),
)

CLUSTER_ARTICLE_TRANSLATIONS = TranslationSpec(
    collection="cluster_article_int",
    foreign_key="cluster_article_id",
    fields=DEFAULT_FIELDS,
)
CLUSTER_SUMMARY_TRANSLATIONS = TranslationSpec(
    collection="cluster_summary_int",
    foreign_key="cluster_summary_id",
    fields=("headline", "content"),
)


async def cluster_ids(store: Store, *, cherry_pick: bool) -> list[Any]:
    rows = await fetcher.fetch_all(store, CLUSTERS, where=eq("cherry_pick", cherry_pick), columns=("cluster_id",))
    return [row["cluster_id"] for row in rows]


async def cluster_story_page(store: Store, *, after: tuple[Any, ...] | None, limit: int) -> FetchResult:
    return await fetcher.fetch_page(
        store,
        CLUSTER_STORIES,
        columns=CLUSTER_STORY_COLUMNS,
        sort_key=CLUSTER_STORY_SORT_KEY,
        after=after,
        limit=limit,
    )


async def cluster_article_page(
    store: Store,
    *,
    cluster_ids: list[Any],
    after: tuple[Any, ...] | None,
    limit: int,
) -> FetchResult:
    return await fetcher.fetch_page(
        store,
        CLUSTER_ARTICLES,
        columns=CLUSTER_ARTICLE_COLUMNS,
        where=in_("cluster_id", cluster_ids),
        sort_key=CLUSTER_ARTICLE_SORT_KEY,
        after=after,
        limit=limit,
    )


async def cluster_page(store: Store, *, after: tuple[Any, ...] | None, limit: int) -> FetchResult:
    return await fetcher.fetch_page(
        store,
        CLUSTERS,
        columns=("cluster_id", "updated_at", "status"),
        sort_key=CLUSTER_SORT_KEY,
        after=after,
        limit=limit,
    )


async def get_summary(store: Store, cluster_id: str) -> dict[str, Any] | None:
    return await fetcher.fetch_one(
        store,
        CLUSTER_SUMMARIES,
        where=eq("cluster_id", cluster_id),
        columns=CLUSTER_SUMMARY.columns,
        order=CLUSTER_SUMMARY.order,
    )
