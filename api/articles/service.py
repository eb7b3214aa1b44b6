"""
Article previews, detail and related-article lookups.
"""

from __future__ import annotations

from typing import Any

from aggregation import assembler, params
from aggregation.references import References, resolve_references
from aggregation.translations import Bundle
from core.errors import NotFound
from core.store import Store
from teams import service as teams_service

from . import repository

PREVIEW_DEFAULT_LIMIT = 25
PREVIEW_MAX_LIMIT = 100
RELATED_LIMIT = 5


def _preview_item(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
    source_article = refs.get("source_article", row.get("SourceArticle")) or {}
    return {
        "id": row["id"],
        "englishHeadline": row.get("headlineEnglish") or "",
        "germanHeadline": row.get("headlineGerman") or "",
        "Image": row.get("Image1"),
        "createdAt": source_article.get("created_at"),
        "teamId": refs.value("team", row.get("team"), "teamId"),
        "status": row.get("status"),
        "UpdatedBy": row.get("UpdatedBy"),
    }


async def article_previews(
    store: Store,
    *,
    cursor: str | None,
    limit: int | None,
    team: str | None,
) -> dict[str, Any]:
    size = params.page_limit(limit, default=PREVIEW_DEFAULT_LIMIT, maximum=PREVIEW_MAX_LIMIT)
    after = params.decode_cursor(repository.PREVIEW_SORT_KEY, cursor)

    team_id = None
    if team and team.strip():
        team_id = await teams_service.resolve_team_id(store, team.strip())

    result = await repository.preview_page(store, team_id=team_id, after=after, limit=size)
    refs = await resolve_references(store, result.rows, [repository.ARTICLE_TEAM, repository.SOURCE_ARTICLE])
    return assembler.assemble_cursor_page(
        result,
        _preview_item,
        sort_key=repository.PREVIEW_SORT_KEY,
        references=refs,
    )


async def article_detail(store: Store, *, article_id: str | None) -> dict[str, Any]:
    number = params.require_int(article_id, "id")
    row = await repository.get_article(store, number)
    if row is None:
        raise NotFound("Article not found or not accessible")

    refs = await resolve_references(store, [row], [repository.ARTICLE_TEAM, repository.SOURCE_ARTICLE])
    source_article = refs.get("source_article", row.get("SourceArticle")) or {}
    return {
        "id": row["id"],
        "englishHeadline": row.get("headlineEnglish") or "",
        "germanHeadline": row.get("headlineGerman") or "",
        "ContentEnglish": row.get("ContentEnglish") or "",
        "ContentGerman": row.get("ContentGerman") or "",
        "Image1": row.get("Image1"),
        "Image2": row.get("Image2"),
        "Image3": row.get("Image3"),
        "createdAt": source_article.get("created_at"),
        "sourceUrl": source_article.get("url"),
        "SourceName": refs.value("news_source", source_article.get("source"), "Name"),
        "teamId": refs.value("team", row.get("team"), "teamId"),
        "status": row.get("status") or "",
        "UpdatedBy": row.get("UpdatedBy"),
        "isUpdate": row.get("isUpdate"),
    }


async def related_articles(store: Store, *, source_article_id: int) -> dict[str, Any]:
    related = await repository.get_related_ids(store, source_article_id)
    if related is None:
        raise NotFound(f"No related articles recorded for source article {source_article_id}")

    wanted = related[:RELATED_LIMIT]
    rows = await repository.articles_for_sources(store, wanted)

    # Most similar first, as ranked in the vector row.
    rank = {value: index for index, value in enumerate(wanted)}
    rows.sort(key=lambda row: rank.get(row.get("SourceArticle"), len(rank)))
    return {"data": rows}
