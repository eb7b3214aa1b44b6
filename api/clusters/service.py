"""
Cluster stories, cluster articles and cluster summaries.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from aggregation import assembler, params
from aggregation.references import References, resolve_references
from aggregation.translations import Bundle, flatten_locales, resolve_all_locales, resolve_translations
from core.errors import NotFound
from core.store import Store

from . import repository

logger = logging.getLogger(__name__)

CLUSTER_STORIES_DEFAULT_LIMIT = 10
CLUSTER_STORIES_MAX_LIMIT = 50
CLUSTER_ARTICLES_DEFAULT_LIMIT = 20
CLUSTER_ARTICLES_MAX_LIMIT = 100
CLUSTER_INFOS_DEFAULT_LIMIT = 20
CLUSTER_INFOS_MAX_LIMIT = 100
DEFAULT_SUMMARY_LOCALE = "de"


def _cluster_story_item(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
    return {
        "id": row["id"],
        "cluster_id": row.get("cluster_id"),
        "headline_english": row.get("headline_english"),
        "headline_german": row.get("headline_german"),
        "summary_english": row.get("summary_english"),
        "summary_german": row.get("summary_german"),
        "image1_url": row.get("image1_url"),
        "image2_url": row.get("image2_url"),
        "image3_url": row.get("image3_url"),
        "updated_at": row.get("updated_at"),
        "sourceArticles": [
            {"id": article["id"], "newsSourceId": article.get("source")}
            for article in refs.get_many("source_articles", row.get("source_article_ids"))
        ],
    }


async def cluster_stories(store: Store, *, cursor: str | None, limit: int | None) -> dict[str, Any]:
    size = params.page_limit(limit, default=CLUSTER_STORIES_DEFAULT_LIMIT, maximum=CLUSTER_STORIES_MAX_LIMIT)
    after = params.decode_cursor(repository.CLUSTER_STORY_SORT_KEY, cursor)

    result = await repository.cluster_story_page(store, after=after, limit=size)
    refs = await resolve_references(store, result.rows, [repository.STORY_SOURCE_ARTICLES])
    return assembler.assemble_cursor_page(
        result,
        _cluster_story_item,
        sort_key=repository.CLUSTER_STORY_SORT_KEY,
        references=refs,
    )


def _sources(row: dict[str, Any], refs: References) -> list[dict[str, Any]]:
    sources = []
    for article in refs.get_many("source_articles", row.get("source_article_ids")):
        name = refs.value("news_sources", article.get("source"), "Name")
        if name is None or article.get("created_at") is None:
            continue
        sources.append({"name": name, "created_at": article["created_at"]})
    sources.sort(key=lambda source: source["created_at"], reverse=True)
    return sources


async def cluster_articles(store: Store, *, cursor: str | None, limit: int | None) -> dict[str, Any]:
    size = params.page_limit(limit, default=CLUSTER_ARTICLES_DEFAULT_LIMIT, maximum=CLUSTER_ARTICLES_MAX_LIMIT)
    after = params.decode_cursor(repository.CLUSTER_ARTICLE_SORT_KEY, cursor)

    cluster_ids = await repository.cluster_ids(store, cherry_pick=False)
    if not cluster_ids:
        return assembler.empty_cursor_page()

    result = await repository.cluster_article_page(store, cluster_ids=cluster_ids, after=after, limit=size)
    base = {row["id"]: row for row in result.rows}
    refs, locales = await asyncio.gather(
        resolve_references(store, result.rows, [repository.ARTICLE_SOURCES]),
        resolve_all_locales(store, repository.CLUSTER_ARTICLE_TRANSLATIONS, base),
    )

    def shape(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
        item = {
            "cluster_article_id": row["id"],
            "created_at": row.get("created_at"),
            "english_headline": row.get("headline"),
            "english_summary": row.get("summary"),
            "english_content": row.get("content"),
            "image_url": row.get("image_url"),
            "sources": _sources(row, refs),
        }
        item.update(flatten_locales(locales.get(row["id"], {})))
        return item

    return assembler.assemble_cursor_page(
        result,
        shape,
        sort_key=repository.CLUSTER_ARTICLE_SORT_KEY,
        references=refs,
    )


async def _summary_bundles(
    store: Store,
    summaries: list[dict[str, Any]],
    locale: str,
) -> dict[Any, Bundle]:
    base = {summary["id"]: summary for summary in summaries}
    return await resolve_translations(store, repository.CLUSTER_SUMMARY_TRANSLATIONS, base, locale)


def _localized_fields(bundle: Bundle | None, locale: str) -> dict[str, Any]:
    return {
        f"headline_{locale}": bundle.get("headline") if bundle else None,
        f"content_{locale}": bundle.get("content") if bundle else None,
    }


async def cluster_infos(
    store: Store,
    *,
    cursor: str | None,
    limit: int | None,
    language_code: str | None,
) -> dict[str, Any]:
    size = params.page_limit(limit, default=CLUSTER_INFOS_DEFAULT_LIMIT, maximum=CLUSTER_INFOS_MAX_LIMIT)
    after = params.decode_cursor(repository.CLUSTER_SORT_KEY, cursor)
    locale = (language_code or "").strip() or DEFAULT_SUMMARY_LOCALE

    result = await repository.cluster_page(store, after=after, limit=size)
    refs = await resolve_references(store, result.rows, [repository.CLUSTER_IMAGE, repository.CLUSTER_SUMMARY])
    bundles = await _summary_bundles(store, list(refs.table("summary").values()), locale)

    def shape(row: dict[str, Any], refs: References, _: Bundle | None) -> dict[str, Any]:
        summary = refs.get("summary", row.get("cluster_id")) or {}
        item = {
            "clusterId": row["cluster_id"],
            "updated_at": row.get("updated_at"),
            "status": row.get("status"),
            "image_url": refs.value("image", row.get("cluster_id"), "image_url"),
            "headline": summary.get("headline"),
            "content": summary.get("content"),
        }
        item.update(_localized_fields(bundles.get(summary.get("id")), locale))
        return item

    return assembler.assemble_cursor_page(
        result,
        shape,
        sort_key=repository.CLUSTER_SORT_KEY,
        references=refs,
    )


async def cluster_summary_by_id(
    store: Store,
    *,
    cluster_id: str | None,
    language_code: str | None,
) -> dict[str, Any]:
    cluster_id = params.require(cluster_id, "cluster_id")
    locale = (language_code or "").strip() or DEFAULT_SUMMARY_LOCALE

    summary = await repository.get_summary(store, cluster_id)
    if summary is None:
        raise NotFound("Cluster summary not found")

    refs, bundles = await asyncio.gather(
        resolve_references(store, [summary], [repository.CLUSTER_IMAGE]),
        _summary_bundles(store, [summary], locale),
    )
    bundle = bundles.get(summary["id"])
    logger.debug(
        "cluster_summary cluster_id=%s locale=%s fallback=%s",
        cluster_id,
        locale,
        bundle.fallback if bundle else None,
    )
    return {
        "headline": summary.get("headline"),
        "content": summary.get("content"),
        "image_url": refs.value("image", summary.get("cluster_id"), "image_url"),
        **_localized_fields(bundle, locale),
    }
