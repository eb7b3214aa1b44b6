"""
Story lines and their views, in the caller's language.

Every text field falls back to the base locale on its own when the requested
translation lacks it.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

from aggregation import assembler, params
from aggregation.references import References
from aggregation.translations import Bundle, resolve_translations
from clusters import repository as clusters_repository
from core import config
from core.errors import NotFound, UpstreamFailure
from core.store import Store

from . import repository

logger = logging.getLogger(__name__)

STORY_LINES_DEFAULT_PAGE_SIZE = 25
STORY_LINES_MAX_PAGE_SIZE = 50


def _story_line_item(row: dict[str, Any], _: References, bundle: Bundle | None) -> dict[str, Any]:
    return {
        "headline": bundle.get("headline") if bundle else row.get("headline"),
        "image_url": row.get("image_url"),
        "cluster_id": row.get("cluster_id"),
    }


async def story_lines(
    store: Store,
    *,
    language_code: str | None,
    page: int | None,
    page_size: int | None,
) -> dict[str, Any]:
    locale = params.require(language_code, "language_code")
    page = params.page_number(page)
    size = params.page_limit(
        page_size,
        default=STORY_LINES_DEFAULT_PAGE_SIZE,
        maximum=STORY_LINES_MAX_PAGE_SIZE,
        name="page_size",
    )

    cluster_ids = await clusters_repository.cluster_ids(store, cherry_pick=True)
    if not cluster_ids:
        return assembler.offset_page([], page=page, page_size=size, total=0)

    rows, total = await repository.story_line_page(store, cluster_ids=cluster_ids, page=page, page_size=size)
    bundles = await resolve_translations(
        store,
        repository.STORY_LINE_HEADLINE_TRANSLATIONS,
        {row["id"]: row for row in rows},
        locale,
    )
    items = assembler.assemble(rows, _story_line_item, translations=bundles)
    return assembler.offset_page(items, page=page, page_size=size, total=total)


async def _views(store: Store, cluster_id: str, locale: str) -> list[dict[str, Any]]:
    try:
        views = await repository.story_line_views(store, cluster_id)
    except Exception:
        logger.warning("story_line_views_failed cluster_id=%s", cluster_id, exc_info=True)
        return []

    bundles = await resolve_translations(
        store,
        repository.VIEW_LABEL_TRANSLATIONS,
        {view["id"]: view for view in views},
        locale,
    )
    return [{"view": bundles[view["id"]].get("view"), "id": view["id"]} for view in views]


async def story_line_by_id(
    store: Store,
    *,
    cluster_id: str | None,
    language_code: str | None,
) -> dict[str, Any]:
    cluster_id = params.require(cluster_id, "cluster_id")
    locale = params.require(language_code, "language_code")

    article = await repository.latest_cluster_article(store, cluster_id)
    if article is None:
        raise NotFound("Article not found")

    bundles, views = await asyncio.gather(
        resolve_translations(store, repository.STORY_LINE_TRANSLATIONS, {article["id"]: article}, locale),
        _views(store, cluster_id, locale),
    )
    bundle = bundles[article["id"]]
    return {
        "data": {
            "headline": bundle.get("headline"),
            "summary": bundle.get("summary"),
            "content": bundle.get("content"),
            "image_url": article.get("image_url"),
            "views": views,
        }
    }


async def story_line_view_by_id(
    store: Store,
    *,
    view_id: str | None,
    language_code: str | None,
) -> dict[str, Any]:
    number = params.require_int(view_id, "story_line_view_id")
    locale = (language_code or "").strip() or config.base_locale()

    view = await repository.get_story_line_view(store, number)
    if view is None:
        raise NotFound("Story line view not found")

    bundles = await resolve_translations(store, repository.VIEW_TRANSLATIONS, {view["id"]: view}, locale)
    bundle = bundles[view["id"]]
    return {
        "data": {
            "headline": bundle.get("headline"),
            "introduction": bundle.get("introduction"),
            "content": bundle.get("content"),
            "language": bundle.language,
        }
    }


def _timeline_entry(raw: dict[str, Any]) -> dict[str, Any] | None:
    headline = raw.get("headline")
    summary = raw.get("summary")
    if not headline and not summary:
        return None
    return {
        "headline": headline or "",
        "instruction": summary or "",
        "content": summary or "",
        "created_at": raw.get("created_at"),
        "source_name": raw.get("source_name"),
    }


def flatten_timeline(timeline_data: Any) -> list[dict[str, Any]]:
    """
    Timeline entries from either layout: a flat list of articles, or a list of
    `{date, articles: [...]}` groups. Entries with neither headline nor summary
    are dropped.
    """
    if isinstance(timeline_data, str):
        try:
            timeline_data = json.loads(timeline_data)
        except ValueError as exc:
            raise UpstreamFailure("Invalid timeline data format") from exc
    if not isinstance(timeline_data, dict):
        return []

    entries: list[dict[str, Any]] = []
    for item in timeline_data.get("timeline") or []:
        if not isinstance(item, dict):
            continue
        articles = item.get("articles")
        candidates = articles if isinstance(articles, list) else [item]
        for raw in candidates:
            if not isinstance(raw, dict):
                continue
            entry = _timeline_entry(raw)
            if entry is not None:
                entries.append(entry)
    return entries


async def _localized_timeline(store: Store, cluster_id: str, locale: str) -> dict[str, Any] | None:
    try:
        return await repository.get_timeline(store, cluster_id, locale=locale)
    except Exception:
        logger.warning("timeline_translation_failed cluster_id=%s locale=%s", cluster_id, locale, exc_info=True)
        return None


async def timeline_by_cluster_id(
    store: Store,
    *,
    cluster_id: str | None,
    language_code: str | None,
) -> dict[str, Any]:
    cluster_id = params.require(cluster_id, "cluster_id")
    locale = (language_code or "").strip() or config.base_locale()

    record = None
    table_source = repository.TIMELINES
    if locale != config.base_locale():
        record = await _localized_timeline(store, cluster_id, locale)
        table_source = repository.LOCALIZED_TIMELINES
    if record is None:
        record = await repository.get_timeline(store, cluster_id)
        table_source = repository.TIMELINES
    if record is None:
        raise NotFound("Timeline not found")

    entries = flatten_timeline(record.get("timeline_data"))
    logger.info(
        "timeline_loaded cluster_id=%s locale=%s table=%s entries=%s",
        cluster_id,
        locale,
        table_source,
        len(entries),
    )
    return {
        "cluster_id": cluster_id,
        "language_code": locale,
        "table_source": table_source,
        "timeline_entries": entries,
        "total_entries": len(entries),
        "retrieved_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
