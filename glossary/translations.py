from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from django.conf import settings

from api.i18n import normalize_language_code

UNTITLED_TERM = "Untitled Term"
NO_DESCRIPTION = "No description available"
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class ResolvedText:
    name: str
    description: str
    language_code: str = ""

    @property
    def is_placeholder(self) -> bool:
        return not self.language_code


def _get(entry: Any, key: str, default: Any = None) -> Any:
    if isinstance(entry, Mapping):
        return entry.get(key, default)
    return getattr(entry, key, default)


def entry_language_code(entry: Any) -> str:
    """Language code of a translation row, a dict, or anything in between."""
    code = _get(entry, "language_code")
    if not code:
        code = _get(entry, "code")
    if not code:
        lang = _get(entry, "language")
        if isinstance(lang, str):
            code = lang
        elif lang is not None:
            code = _get(lang, "code")
    return normalize_language_code(code)


def fallback_language_code() -> str:
    return normalize_language_code(getattr(settings, "GLOSSARY_FALLBACK_LANGUAGE", "en")) or "en"


def pick_translation(
    translations: Iterable[Any] | None,
    requested_locale: str | None,
    *,
    fallback_language: str | None = None,
) -> Any | None:
    """Requested locale, then the fallback language, then the first stored entry."""
    entries = list(translations or [])
    if not entries:
        return None

    requested = normalize_language_code(requested_locale)
    fallback = normalize_language_code(fallback_language) if fallback_language else fallback_language_code()

    by_code: dict[str, Any] = {}
    for e in entries:
        by_code.setdefault(entry_language_code(e), e)

    for code in (requested, fallback):
        if code and code in by_code:
            return by_code[code]
    return entries[0]


def resolve(
    translations: Iterable[Any] | None,
    requested_locale: str | None,
    *,
    fallback_language: str | None = None,
    placeholder_name: str = UNTITLED_TERM,
    placeholder_description: str = NO_DESCRIPTION,
) -> ResolvedText:
    best = pick_translation(translations, requested_locale, fallback_language=fallback_language)
    if best is None:
        return ResolvedText(name=placeholder_name, description=placeholder_description)

    return ResolvedText(
        name=str(_get(best, "name", "") or ""),
        description=str(_get(best, "description", "") or ""),
        language_code=entry_language_code(best),
    )


def resolve_term(term, requested_locale: str | None) -> ResolvedText:
    version = getattr(term, "active_version", None) if term is not None else None
    translations = list(version.translations.all()) if version is not None else []
    return resolve(translations, requested_locale)


def resolve_version(version, requested_locale: str | None) -> ResolvedText:
    translations = list(version.translations.all()) if version is not None else []
    return resolve(translations, requested_locale)


def resolve_category_name(category, requested_locale: str | None) -> str:
    if category is None:
        return UNCATEGORIZED
    return resolve(
        category.translations.all(),
        requested_locale,
        placeholder_name=UNCATEGORIZED,
        placeholder_description="",
    ).name


def resolve_label_name(label, requested_locale: str | None) -> str:
    return resolve(
        label.translations.all(),
        requested_locale,
        placeholder_name=f"Label {label.id}",
        placeholder_description="",
    ).name
