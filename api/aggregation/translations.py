"""
Locale overlays with per-field fallback.

Localized rows live in `*_int` tables keyed by the base row's id and a
`language_code`. A localized field replaces the base field only when it has
content; every other field keeps the base-locale value, so a translation
that lacks a summary still contributes its headline.

Translations are an enrichment: when the batch read fails, every id gets its
base-locale bundle flagged as a fallback instead of failing the request.
Locale codes are compared exactly as supplied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from core import config
from core.store import Select, Store, all_of, eq, in_

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = ("headline", "summary", "content")


@dataclass(frozen=True)
class TranslationSpec:
    collection: str
    foreign_key: str
    fields: tuple[str, ...] = DEFAULT_FIELDS
    locale_field: str = "language_code"


@dataclass(frozen=True)
class Bundle:
    locale: str
    base_locale: str
    values: dict[str, Any]
    fallback_fields: frozenset[str]

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    @property
    def fallback(self) -> bool:
        return bool(self.fallback_fields)

    @property
    def language(self) -> str:
        """
        Locale the content is actually in: the base locale when nothing was localized.
        """
        if self.locale != self.base_locale and self.fallback_fields == frozenset(self.values):
            return self.base_locale
        return self.locale


def _has_content(value: Any) -> bool:
    return value is not None and value != ""


def merge_bundle(
    base: Mapping[str, Any],
    localized: Mapping[str, Any] | None,
    *,
    fields: tuple[str, ...],
    locale: str,
    base_locale: str,
) -> Bundle:
    values: dict[str, Any] = {}
    fell_back: set[str] = set()
    for name in fields:
        candidate = localized.get(name) if localized is not None else None
        if _has_content(candidate):
            values[name] = candidate
        else:
            values[name] = base.get(name)
            if locale != base_locale:
                fell_back.add(name)
    return Bundle(locale=locale, base_locale=base_locale, values=values, fallback_fields=frozenset(fell_back))


def base_bundles(
    base: Mapping[Any, Mapping[str, Any]],
    *,
    fields: tuple[str, ...],
    locale: str,
    base_locale: str,
) -> dict[Any, Bundle]:
    return {
        key: merge_bundle(record, None, fields=fields, locale=locale, base_locale=base_locale)
        for key, record in base.items()
    }


async def resolve_translations(
    store: Store,
    spec: TranslationSpec,
    base: Mapping[Any, Mapping[str, Any]],
    locale: str,
    *,
    base_locale: str | None = None,
) -> dict[Any, Bundle]:
    """
    One bundle per base id for `locale`, fetched in a single batch.

    `base` maps each primary id to its base-locale record.
    """
    base_locale = base_locale or config.base_locale()
    if locale == base_locale or not base:
        return base_bundles(base, fields=spec.fields, locale=locale, base_locale=base_locale)

    try:
        rows = await store.select(
            Select(
                collection=spec.collection,
                columns=(spec.foreign_key, spec.locale_field) + spec.fields,
                where=all_of(eq(spec.locale_field, locale), in_(spec.foreign_key, base.keys())),
            )
        )
    except Exception:
        logger.warning(
            "translation_fetch_failed collection=%s locale=%s ids=%s",
            spec.collection,
            locale,
            len(base),
            exc_info=True,
        )
        return base_bundles(base, fields=spec.fields, locale=locale, base_locale=base_locale)

    localized: dict[Any, Mapping[str, Any]] = {}
    for row in rows:
        localized.setdefault(row.get(spec.foreign_key), row)

    return {
        key: merge_bundle(
            record,
            localized.get(key),
            fields=spec.fields,
            locale=locale,
            base_locale=base_locale,
        )
        for key, record in base.items()
    }


async def resolve_all_locales(
    store: Store,
    spec: TranslationSpec,
    base: Mapping[Any, Mapping[str, Any]],
    *,
    base_locale: str | None = None,
) -> dict[Any, dict[str, Bundle]]:
    """
    Every available locale per base id: id -> {locale -> bundle}.

    Used by endpoints that ship all translations at once; the base locale is
    the primary row itself and is not repeated here.
    """
    base_locale = base_locale or config.base_locale()
    result: dict[Any, dict[str, Bundle]] = {key: {} for key in base}
    if not base:
        return result

    try:
        rows = await store.select(
            Select(
                collection=spec.collection,
                columns=(spec.foreign_key, spec.locale_field) + spec.fields,
                where=in_(spec.foreign_key, base.keys()),
            )
        )
    except Exception:
        logger.warning(
            "translation_fetch_failed collection=%s locale=* ids=%s",
            spec.collection,
            len(base),
            exc_info=True,
        )
        return result

    for row in rows:
        key = row.get(spec.foreign_key)
        locale = row.get(spec.locale_field)
        if key not in result or not locale or locale == base_locale or locale in result[key]:
            continue
        result[key][locale] = merge_bundle(
            base[key],
            row,
            fields=spec.fields,
            locale=locale,
            base_locale=base_locale,
        )
    return result


def flatten_locales(bundles: Mapping[str, Bundle], fields: tuple[str, ...] | None = None) -> dict[str, Any]:
    """
    Serialize `{locale: bundle}` as flat `<locale>_<field>` keys.
    """
    flat: dict[str, Any] = {}
    for locale, bundle in bundles.items():
        for name in fields or tuple(bundle.values):
            flat[f"{locale}_{name}"] = bundle.get(name)
    return flat
