"""Version Store: drafts, publishing and version history of glossary terms.

Every write runs in one ``transaction.atomic()`` block and locks the owning
``Term`` row first, so concurrent fork/publish requests on the same term are
serialised. Whoever acquires the lock second re-reads the version status and
gets ``IllegalTransition`` / ``EditorialConflict`` instead of corrupting the
active-version pointer.
"""
from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings
from django.db import transaction
from django.db.models import Max
from django.utils import timezone

from api.errors import EditorialConflict, FieldErrors, IllegalTransition, NotFound, ValidationFailed
from api.i18n import normalize_language_code

from .models import Category, Label, Language, Term, TermLabel, TermTranslation, TermVersion
from .translations import resolve
from .workflow import EditMode, decide, ensure_draft, ensure_transition

logger = logging.getLogger(__name__)

Status = TermVersion.Status

NAME_MAX_LENGTH = 255


@dataclass(frozen=True)
class TranslationData:
    name: str
    description: str | None = None


@dataclass
class VersionForEditing:
    version: TermVersion
    translations: list[TermTranslation]
    edit_mode: EditMode | None = None


@dataclass
class VersionHistory:
    term: Term
    term_name: str
    versions: list[TermVersion] = field(default_factory=list)


@dataclass(frozen=True)
class DiscardResult:
    term_id: int
    term_deleted: bool


def _field(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key)
    return getattr(value, key, None)


def enabled_languages() -> dict[str, Language]:
    return {normalize_language_code(lang.code): lang for lang in Language.objects.filter(is_enabled=True)}


def required_language_codes(enabled: Mapping[str, Language]) -> list[str]:
    raw = getattr(settings, "GLOSSARY_REQUIRED_LANGUAGE_CODES", []) or []
    codes = [normalize_language_code(c) for c in raw]
    return [c for c in codes if c and c in enabled]


def check_name(errors: FieldErrors, code: str, raw_name: Any) -> str | None:
    name = str(raw_name or "").strip()
    if not name:
        errors.add(code, "name", "Name is required.")
        return None
    if len(name) > NAME_MAX_LENGTH:
        errors.add(code, "name", f"Name must be at most {NAME_MAX_LENGTH} characters.")
        return None
    return name


def clean_translations(
    translations_by_language: Mapping[str, Any] | None,
    *,
    existing_codes: Iterable[str] = (),
    enforce_required: bool = True,
) -> dict[str, TranslationData]:
    """Validate submitted per-language text and return it normalised.

    Problems are collected per language so the caller can point at the exact
    localized field that failed.
    """
    enabled = enabled_languages()
    errors = FieldErrors()
    cleaned: dict[str, TranslationData] = {}

    for raw_code, value in (translations_by_language or {}).items():
        code = normalize_language_code(raw_code)
        if not code:
            errors.add_general("Translation submitted without a language code.")
            continue
        if code not in enabled:
            errors.add(code, "language", "Unknown or disabled language.")
            continue

        name = check_name(errors, code, _field(value, "name"))
        if name is None:
            continue
        raw_description = _field(value, "description")
        description = None if raw_description is None else str(raw_description).strip()
        cleaned[code] = TranslationData(name=name, description=description)

    if enforce_required:
        present = set(cleaned) | {normalize_language_code(c) for c in existing_codes}
        for code in required_language_codes(enabled):
            if code not in present and code not in errors.fields:
                errors.add(code, "name", "Name is required.")

    if not cleaned and not errors:
        errors.add_general("At least one translation is required.")

    errors.raise_if_any()
    return cleaned


def _load_version(version_id: int) -> TermVersion:
    version = TermVersion.objects.filter(id=int(version_id)).first()
    if version is None:
        raise NotFound("Term version not found.")
    return version


def _lock_version(version_id: int) -> tuple[Term, TermVersion]:
    """Lock the owning term, then re-read the version under that lock."""
    version = _load_version(version_id)
    term = Term.objects.select_for_update().filter(id=version.term_id).first()
    if term is None:
        raise NotFound("Term not found.")
    version = TermVersion.objects.select_for_update().filter(id=version.id).first()
    if version is None:
        raise NotFound("Term version not found.")
    return term, version


def _next_version_number(term_id: int) -> int:
    latest = TermVersion.objects.filter(term_id=term_id).aggregate(m=Max("version_number"))["m"]
    return int(latest or 0) + 1


def _write_translations(version: TermVersion, cleaned: Mapping[str, TranslationData]) -> None:
    if not cleaned:
        return
    languages = enabled_languages()
    for code, data in cleaned.items():
        # A missing description leaves the stored one untouched.
        defaults = {"name": data.name}
        if data.description is not None:
            defaults["description"] = data.description
        TermTranslation.objects.update_or_create(version=version, language=languages[code], defaults=defaults)


def _promote(term: Term, version: TermVersion) -> TermVersion:
    """Make ``version`` the single PUBLISHED, active version of ``term``.

    Caller holds the term lock and has already validated the transition.
    """
    now = timezone.now()
    previous = list(
        TermVersion.objects.select_for_update()
        .filter(term_id=term.id, status=Status.PUBLISHED)
        .exclude(id=version.id)
    )
    for prev in previous:
        ensure_transition(prev.status, Status.ARCHIVED)
        prev.status = Status.ARCHIVED
        prev.archived_at = now
        prev.ready_to_publish = False
        prev.save(update_fields=["status", "archived_at", "ready_to_publish"])

    version.status = Status.PUBLISHED
    version.published_at = now
    version.archived_at = None
    version.ready_to_publish = True
    version.save(update_fields=["status", "published_at", "archived_at", "ready_to_publish"])

    term.active_version = version
    term.save(update_fields=["active_version", "updated_at"])
    return version


def get_version_for_editing(version_id: int) -> VersionForEditing:
    version = (
        TermVersion.objects.select_related("term", "term__category")
        .filter(id=int(version_id))
        .first()
    )
    if version is None:
        raise NotFound("Term version not found.")
    translations = list(version.translations.select_related("language").order_by("language_id"))
    return VersionForEditing(version=version, translations=translations)


def load_for_edit(version_id: int, mode_hint: str | None = None) -> VersionForEditing:
    loaded = get_version_for_editing(version_id)
    loaded.edit_mode = decide(loaded.version.status, mode_hint)
    return loaded


def create_draft_from(source_version_id: int, *, created_by=None) -> TermVersion:
    with transaction.atomic():
        term, source = _lock_version(source_version_id)

        if TermVersion.objects.filter(term_id=term.id, status=Status.DRAFT).exists():
            raise EditorialConflict("This term already has an open draft; finish or discard it first.")

        source_rows = list(source.translations.all())
        if not source_rows:
            raise ValidationFailed(general=["Cannot create new version: the source version has no translations."])

        draft = TermVersion.objects.create(
            term=term,
            version_number=_next_version_number(term.id),
            status=Status.DRAFT,
            ready_to_publish=False,
            created_by=created_by,
        )
        TermTranslation.objects.bulk_create(
            [
                TermTranslation(
                    version=draft,
                    language_id=row.language_id,
                    name=row.name,
                    description=row.description,
                )
                for row in source_rows
            ]
        )

    logger.info(
        "Created draft from source version",
        extra={"term_id": term.id, "source_version_id": source.id, "version_id": draft.id},
    )
    return draft


def save_draft(version_id: int, translations_by_language: Mapping[str, Any]) -> TermVersion:
    with transaction.atomic():
        _term, version = _lock_version(version_id)
        ensure_draft(version, "update")

        existing_codes = [
            normalize_language_code(c)
            for c in version.translations.values_list("language__code", flat=True)
        ]
        cleaned = clean_translations(translations_by_language, existing_codes=existing_codes)
        _write_translations(version, cleaned)

    return version


def fork_and_save(
    source_version_id: int,
    translations_by_language: Mapping[str, Any],
    *,
    created_by=None,
) -> TermVersion:
    with transaction.atomic():
        draft = create_draft_from(source_version_id, created_by=created_by)
        return save_draft(draft.id, translations_by_language)


def submit_edit(
    version_id: int,
    translations_by_language: Mapping[str, Any],
    *,
    mode_hint: str | None = None,
    created_by=None,
) -> tuple[EditMode, TermVersion]:
    version = _load_version(version_id)
    mode = decide(version.status, mode_hint)
    if mode == EditMode.EDIT_EXISTING:
        return mode, save_draft(version.id, translations_by_language)
    if mode == EditMode.CREATE_FROM_SOURCE:
        return mode, fork_and_save(version.id, translations_by_language, created_by=created_by)
    raise IllegalTransition(
        "Cannot update: only DRAFT versions can be edited. Create a new draft from this version instead."
    )


def set_ready_to_publish(version_id: int, ready: bool = True) -> TermVersion:
    with transaction.atomic():
        _term, version = _lock_version(version_id)
        ensure_draft(version, "change readiness")
        version.ready_to_publish = bool(ready)
        version.save(update_fields=["ready_to_publish"])
    return version


def publish(version_id: int, *, force: bool = False) -> TermVersion:
    with transaction.atomic():
        term, version = _lock_version(version_id)
        if version.status != Status.DRAFT:
            raise IllegalTransition(f"Cannot publish: version is {version.status}, not DRAFT.")
        ensure_transition(version.status, Status.PUBLISHED)
        if not version.ready_to_publish and not force:
            raise IllegalTransition("Cannot publish: version is not marked ready to publish.")
        _promote(term, version)

    logger.info("Published term version", extra={"term_id": term.id, "version_id": version.id})
    return version


def restore(version_id: int) -> TermVersion:
    with transaction.atomic():
        term, version = _lock_version(version_id)
        if version.status != Status.ARCHIVED:
            raise IllegalTransition("Only ARCHIVED versions can be restored.")
        ensure_transition(version.status, Status.PUBLISHED)
        _promote(term, version)

    logger.info("Restored archived term version", extra={"term_id": term.id, "version_id": version.id})
    return version


def discard_draft(version_id: int) -> DiscardResult:
    with transaction.atomic():
        term, version = _lock_version(version_id)
        ensure_draft(version, "discard")

        version.delete()
        term_deleted = False
        if not TermVersion.objects.filter(term_id=term.id).exists():
            term.delete()
            term_deleted = True

    logger.info(
        "Discarded draft",
        extra={"term_id": term.id if not term_deleted else None, "version_id": int(version_id)},
    )
    return DiscardResult(term_id=int(version.term_id), term_deleted=term_deleted)


def list_version_history(identifier: str, *, language_code: str | None = None) -> VersionHistory:
    term = Term.objects.filter(identifier=(identifier or "").strip()).first()
    if term is None:
        raise NotFound("Term not found.")

    versions = list(
        TermVersion.objects.filter(term_id=term.id)
        .prefetch_related("translations__language")
        .order_by("-version_number")
    )
    named_from = next((v for v in versions if v.id == term.active_version_id), None) or (
        versions[0] if versions else None
    )
    rows = list(named_from.translations.all()) if named_from is not None else []
    resolved = resolve(rows, language_code, placeholder_name=term.identifier)
    return VersionHistory(term=term, term_name=resolved.name, versions=versions)


def _new_identifier() -> str:
    while True:
        candidate = f"term_{secrets.token_hex(4)}"
        if not Term.objects.filter(identifier=candidate).exists():
            return candidate


def create_term(
    *,
    category_id: int | None,
    translations_by_language: Mapping[str, Any],
    label_ids: Iterable[int] = (),
    created_by=None,
    publish: bool = False,
    identifier: str | None = None,
    enforce_required: bool = True,
) -> TermVersion:
    """New term with version 1.

    Editorial flow leaves version 1 as a DRAFT with no active version;
    ``publish=True`` is the bulk-import path that skips the draft stage.
    """
    if category_id is None or not Category.objects.filter(id=int(category_id)).exists():
        raise NotFound(f"Category with ID {category_id} not found.")

    label_ids = sorted({int(i) for i in label_ids})
    if label_ids:
        known = set(Label.objects.filter(id__in=label_ids).values_list("id", flat=True))
        missing = [i for i in label_ids if i not in known]
        if missing:
            raise NotFound(f"Labels not found: {', '.join(str(i) for i in missing)}.")

    cleaned = clean_translations(translations_by_language, enforce_required=enforce_required)

    with transaction.atomic():
        term = Term.objects.create(
            identifier=(identifier or "").strip() or _new_identifier(),
            category_id=int(category_id),
        )
        version = TermVersion.objects.create(
            term=term,
            version_number=1,
            status=Status.DRAFT,
            ready_to_publish=True,
            created_by=created_by,
        )
        _write_translations(version, cleaned)
        if label_ids:
            TermLabel.objects.bulk_create([TermLabel(term=term, label_id=i) for i in label_ids])
        if publish:
            _promote(term, version)

    logger.info(
        "Created term",
        extra={"term_id": term.id, "version_id": version.id, "published": bool(publish)},
    )
    return version
