from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import BooleanField, Count, Exists, ExpressionWrapper, OuterRef, Q

from api.errors import FieldErrors, NotFound, ValidationFailed
from api.i18n import normalize_language_code
from community.models import Comment

from .models import (
    Category,
    CategoryTranslation,
    Label,
    LabelTranslation,
    Language,
    Term,
    TermLabel,
    TermTranslation,
    TermVersion,
)
from .translations import entry_language_code, resolve_category_name, resolve_label_name, resolve_version
from .versions import check_name, enabled_languages, required_language_codes

Status = TermVersion.Status


def public_page_size() -> int:
    return max(1, int(getattr(settings, "GLOSSARY_PAGE_SIZE", 15) or 15))


def admin_page_size() -> int:
    return max(1, int(getattr(settings, "GLOSSARY_ADMIN_PAGE_SIZE", 10) or 10))


# Serialization


def translations_payload(rows) -> list[dict[str, Any]]:
    return [
        {
            "language_code": entry_language_code(r),
            "name": r.name,
            "description": getattr(r, "description", "") or "",
        }
        for r in rows
    ]


def category_ref(category, locale: str | None) -> dict[str, Any] | None:
    if category is None:
        return None
    return {"id": category.id, "name": resolve_category_name(category, locale)}


def label_refs(labels, locale: str | None) -> list[dict[str, Any]]:
    out = [{"id": lb.id, "name": resolve_label_name(lb, locale)} for lb in labels]
    out.sort(key=lambda x: (x["name"].lower(), x["id"]))
    return out


def term_summary(term: Term, locale: str | None) -> dict[str, Any]:
    version = term.active_version
    text = resolve_version(version, locale)
    return {
        "id": term.id,
        "identifier": term.identifier,
        "name": text.name,
        "description": text.description,
        "language_code": text.language_code,
        "category": category_ref(term.category, locale),
        "category_name": resolve_category_name(term.category, locale),
        "labels": label_refs(term.labels.all(), locale),
        "version_id": version.id if version is not None else None,
        "version_number": version.version_number if version is not None else None,
        "published_at": version.published_at if version is not None else None,
    }


def version_summary(version: TermVersion, locale: str | None) -> dict[str, Any]:
    term = version.term
    text = resolve_version(version, locale)
    return {
        "id": version.id,
        "term_id": term.id,
        "identifier": term.identifier,
        "version_number": version.version_number,
        "status": version.status,
        "ready_to_publish": version.ready_to_publish,
        "is_active": term.active_version_id == version.id,
        "name": text.name,
        "category_name": resolve_category_name(term.category, locale),
        "created_at": version.created_at,
        "published_at": version.published_at,
        "archived_at": version.archived_at,
    }


def version_detail(version: TermVersion, translations, locale: str | None) -> dict[str, Any]:
    out = version_summary(version, locale)
    out["category_id"] = version.term.category_id
    out["translations"] = translations_payload(translations)
    out["labels"] = label_refs(version.term.labels.all(), locale)
    return out


# Public browsing


def _visible_terms():
    return (
        Term.objects.filter(active_version__status=Status.PUBLISHED)
        .select_related("category", "active_version")
        .prefetch_related(
            "active_version__translations__language",
            "category__translations__language",
            "labels__translations__language",
        )
        .order_by("-created_at", "-id")
    )


def _page(qs, *, skip: int, locale: str | None) -> dict[str, Any]:
    size = public_page_size()
    skip = max(0, int(skip or 0))
    rows = list(qs[skip: skip + size + 1])
    has_more = len(rows) > size
    rows = rows[:size]
    return {
        "terms": [term_summary(t, locale) for t in rows],
        "has_more": has_more,
        "next_skip": skip + len(rows),
    }


def search_terms(query: str | None, skip: int = 0, *, locale: str | None = None) -> dict[str, Any]:
    """AND-of-words search over the active version's names and descriptions.

    Terms whose names contain every word rank first; the rest keep
    newest-first order.
    """
    words = [w for w in (query or "").split() if w]
    qs = _visible_terms()
    if not words:
        return _page(qs, skip=skip, locale=locale)

    for w in words:
        qs = qs.filter(
            Q(active_version__translations__name__icontains=w)
            | Q(active_version__translations__description__icontains=w)
        )

    name_match = Q()
    for w in words:
        name_match &= Q(
            Exists(TermTranslation.objects.filter(version_id=OuterRef("active_version_id"), name__icontains=w))
        )
    qs = (
        qs.distinct()
        .annotate(name_match=ExpressionWrapper(name_match, output_field=BooleanField()))
        .order_by("-name_match", "-created_at", "-id")
    )
    return _page(qs, skip=skip, locale=locale)


def recent_terms(skip: int = 0, *, locale: str | None = None) -> dict[str, Any]:
    return _page(_visible_terms(), skip=skip, locale=locale)


def terms_by_category(category_name: str, skip: int = 0, *, locale: str | None = None) -> dict[str, Any]:
    name = (category_name or "").strip()
    category_ids = list(
        CategoryTranslation.objects.filter(name__iexact=name).values_list("category_id", flat=True).distinct()
    ) if name else []
    if not category_ids:
        return {"terms": [], "has_more": False, "next_skip": max(0, int(skip or 0))}
    return _page(_visible_terms().filter(category_id__in=category_ids), skip=skip, locale=locale)


def term_detail(term_id: int, *, locale: str | None = None) -> dict[str, Any]:
    term = _visible_terms().filter(id=int(term_id)).first()
    if term is None:
        raise NotFound("Term not found.")
    out = term_summary(term, locale)
    out["translations"] = translations_payload(term.active_version.translations.all())
    return out


def list_categories(locale: str | None = None) -> list[dict[str, Any]]:
    qs = Category.objects.prefetch_related("translations__language").annotate(
        term_count=Count("terms", filter=Q(terms__active_version__status=Status.PUBLISHED), distinct=True)
    )
    out = [
        {
            "id": c.id,
            "name": resolve_category_name(c, locale),
            "term_count": c.term_count,
            "translations": {entry_language_code(t): t.name for t in c.translations.all()},
        }
        for c in qs
    ]
    out.sort(key=lambda x: (x["name"].lower(), x["id"]))
    return out


def list_languages() -> list[dict[str, Any]]:
    return [
        {"code": lang.code, "name": lang.name, "is_default": lang.is_default}
        for lang in Language.objects.filter(is_enabled=True)
    ]


# Categories and labels


def _clean_names(
    names_by_language: Mapping[str, Any] | None,
    *,
    require_languages: bool,
) -> dict[str, str]:
    enabled = enabled_languages()
    errors = FieldErrors()
    cleaned: dict[str, str] = {}

    for raw_code, raw_name in (names_by_language or {}).items():
        code = normalize_language_code(raw_code)
        if code not in enabled:
            errors.add(code or str(raw_code), "language", "Unknown or disabled language.")
            continue
        name = check_name(errors, code, raw_name)
        if name is not None:
            cleaned[code] = name

    if require_languages:
        for code in required_language_codes(enabled):
            if code not in cleaned and code not in errors.fields:
                errors.add(code, "name", "Name is required.")

    if not cleaned and not errors:
        errors.add_general("At least one name is required.")
    errors.raise_if_any()
    return cleaned


def _get_category(category_id: int) -> Category:
    category = Category.objects.filter(id=int(category_id)).first()
    if category is None:
        raise NotFound("Category not found.")
    return category


def _get_label(label_id: int) -> Label:
    label = Label.objects.filter(id=int(label_id)).first()
    if label is None:
        raise NotFound("Label not found.")
    return label


def _get_term(term_id: int) -> Term:
    term = Term.objects.filter(id=int(term_id)).first()
    if term is None:
        raise NotFound("Term not found.")
    return term


def create_category(names_by_language: Mapping[str, Any]) -> Category:
    cleaned = _clean_names(names_by_language, require_languages=True)
    languages = enabled_languages()
    with transaction.atomic():
        category = Category.objects.create()
        CategoryTranslation.objects.bulk_create(
            [CategoryTranslation(category=category, language=languages[c], name=n) for c, n in cleaned.items()]
        )
    return category


def update_category(category_id: int, names_by_language: Mapping[str, Any]) -> Category:
    category = _get_category(category_id)
    cleaned = _clean_names(names_by_language, require_languages=True)
    languages = enabled_languages()
    with transaction.atomic():
        for code, name in cleaned.items():
            CategoryTranslation.objects.update_or_create(
                category=category, language=languages[code], defaults={"name": name}
            )
        category.save(update_fields=["updated_at"])
    return category


def delete_category(category_id: int) -> None:
    category = _get_category(category_id)
    in_use = Term.objects.filter(category_id=category.id).count()
    if in_use:
        raise ValidationFailed(
            "Category is in use",
            general=[f"Cannot delete category: {in_use} term(s) still use it."],
        )
    category.delete()


def set_term_category(term_id: int, category_id: int) -> Term:
    term = _get_term(term_id)
    category = _get_category(category_id)
    term.category = category
    term.save(update_fields=["category", "updated_at"])
    return term


def create_label(names_by_language: Mapping[str, Any]) -> Label:
    cleaned = _clean_names(names_by_language, require_languages=False)
    languages = enabled_languages()
    with transaction.atomic():
        label = Label.objects.create()
        LabelTranslation.objects.bulk_create(
            [LabelTranslation(label=label, language=languages[c], name=n) for c, n in cleaned.items()]
        )
    return label


def update_label(label_id: int, names_by_language: Mapping[str, Any]) -> Label:
    label = _get_label(label_id)
    cleaned = _clean_names(names_by_language, require_languages=False)
    languages = enabled_languages()
    with transaction.atomic():
        for code, name in cleaned.items():
            LabelTranslation.objects.update_or_create(label=label, language=languages[code], defaults={"name": name})
        label.save(update_fields=["updated_at"])
    return label


def delete_label(label_id: int) -> None:
    label = _get_label(label_id)
    in_use = TermLabel.objects.filter(label_id=label.id).count()
    if in_use:
        raise ValidationFailed(
            "Label is in use",
            general=[f"Cannot delete label: it is attached to {in_use} term(s)."],
        )
    label.delete()


def list_labels(
    page: int = 1,
    page_size: int | None = None,
    query: str | None = None,
    *,
    locale: str | None = None,
) -> dict[str, Any]:
    page = max(1, int(page or 1))
    page_size = max(1, int(page_size or admin_page_size()))

    qs = Label.objects.prefetch_related("translations__language").annotate(
        usage_count=Count("term_labels", distinct=True)
    )
    q = (query or "").strip()
    if q:
        qs = qs.filter(translations__name__icontains=q).distinct()

    items = [
        {
            "id": lb.id,
            "name": resolve_label_name(lb, locale),
            "translations": {entry_language_code(t): t.name for t in lb.translations.all()},
            "usage_count": lb.usage_count,
        }
        for lb in qs
    ]
    items.sort(key=lambda x: (x["name"].lower(), x["id"]))
    start = (page - 1) * page_size
    return {
        "labels": items[start: start + page_size],
        "total": len(items),
        "page": page,
        "page_size": page_size,
    }


def labels_for_select(locale: str | None = None) -> list[dict[str, Any]]:
    return label_refs(Label.objects.prefetch_related("translations__language"), locale)


def add_label_to_term(term_id: int, label_id: int) -> bool:
    """Attach a label; returns False if it was already attached."""
    term = _get_term(term_id)
    label = _get_label(label_id)
    _obj, created = TermLabel.objects.get_or_create(term=term, label=label)
    return created


def remove_label_from_term(term_id: int, label_id: int) -> bool:
    term = _get_term(term_id)
    deleted, _ = TermLabel.objects.filter(term=term, label_id=int(label_id)).delete()
    return bool(deleted)


def term_labels(term_id: int, locale: str | None = None) -> list[dict[str, Any]]:
    term = _get_term(term_id)
    return label_refs(term.labels.prefetch_related("translations__language"), locale)


# Admin term management


def managed_versions(
    status: str | None = None,
    query: str | None = None,
    category_id: int | None = None,
    page: int = 1,
    page_size: int | None = None,
    *,
    locale: str | None = None,
) -> dict[str, Any]:
    page = max(1, int(page or 1))
    page_size = max(1, int(page_size or admin_page_size()))

    qs = TermVersion.objects.select_related("term", "term__category").prefetch_related(
        "translations__language", "term__category__translations__language"
    )
    status = (status or "").strip().upper()
    if status:
        if status not in Status.values:
            raise ValidationFailed(general=[f"Unknown status: {status}."])
        qs = qs.filter(status=status)
    if category_id:
        qs = qs.filter(term__category_id=int(category_id))
    for w in (query or "").split():
        qs = qs.filter(Q(translations__name__icontains=w) | Q(term__identifier__icontains=w))
    qs = qs.distinct().order_by("-created_at", "-id")

    total = qs.count()
    start = (page - 1) * page_size
    return {
        "items": [version_summary(v, locale) for v in qs[start: start + page_size]],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


def pending_count() -> int:
    return TermVersion.objects.filter(status=Status.DRAFT).count()


def dashboard_counts() -> dict[str, int]:
    return {
        "pending_drafts": pending_count(),
        "published_terms": Term.objects.filter(active_version__status=Status.PUBLISHED).count(),
        "open_comments": Comment.objects.filter(is_deleted=False, is_closed=False, parent__isnull=True).count(),
        "labels": Label.objects.count(),
        "users": get_user_model().objects.count(),
    }
