"""
News article reads.

`NewsArticles.team` points at `Teams.id`, `NewsArticles.SourceArticle` at
`SourceArticles.id`, and `SourceArticles.source` at `NewsSource.id`.
"""

from __future__ import annotations

from typing import Any

from aggregation import fetcher
from aggregation.cursor import SortField, sort_key
from aggregation.fetcher import FetchResult
from aggregation.references import ReferenceSpec
from core.store import Store, all_of, eq, neq

NEWS_ARTICLES = "NewsArticles"
SOURCE_ARTICLES = "SourceArticles"
NEWS_SOURCES = "NewsSource"
ARTICLE_VECTORS = "ArticleVector"
TEAMS = "Teams"

ARCHIVED_STATUS = "ARCHIVED"

PREVIEW_COLUMNS = (
    "id",
    "headlineEnglish",
    "headlineGerman",
    "Image1",
    "status",
    "UpdatedBy",
    "team",
    "SourceArticle",
)
RELATED_COLUMNS = ("SourceArticle", "headlineGerman", "headlineEnglish")

PREVIEW_SORT_KEY = sort_key(SortField("id"))

ARTICLE_TEAM = ReferenceSpec(name="team", field="team", collection=TEAMS, columns=("id", "teamId"))
NEWS_SOURCE = ReferenceSpec(name="news_source", field="source", collection=NEWS_SOURCES, columns=("id", "Name"))
SOURCE_ARTICLE = ReferenceSpec(
    name="source_article",
    field="SourceArticle",
    collection=SOURCE_ARTICLES,
    columns=("id", "created_at", "url", "source"),
    nested=(NEWS_SOURCE,),
)


async def preview_page(
    store: Store,
    *,
    team_id: int | None,
    after: tuple[Any, ...] | None,
    limit: int,
) -> FetchResult:
    where = all_of(
        neq("status", ARCHIVED_STATUS),
        eq("team", team_id) if team_id is not None else None,
    )
    return await fetcher.fetch_page(
        store,
        NEWS_ARTICLES,
        columns=PREVIEW_COLUMNS,
        where=where,
        sort_key=PREVIEW_SORT_KEY,
        after=after,
        limit=limit,
    )


async def get_article(store: Store, article_id: int) -> dict[str, Any] | None:
    return await fetcher.fetch_one(store, NEWS_ARTICLES, where=eq("id", article_id))


async def get_related_ids(store: Store, source_article_id: int) -> list[Any] | None:
    row = await fetcher.fetch_one(
        store,
        ARTICLE_VECTORS,
        where=eq("SourceArticle", source_article_id),
        columns=("related",),
    )
    if row is None:
        return None
    return list(row.get("related") or [])


async def articles_for_sources(store: Store, source_article_ids: list[Any]) -> list[dict[str, Any]]:
    return await fetcher.fetch_in(
        store,
        NEWS_ARTICLES,
        key="SourceArticle",
        values=source_article_ids,
        columns=RELATED_COLUMNS,
    )
