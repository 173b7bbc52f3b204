from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from api.errors import AuthorizationDenied, NotFound, ValidationFailed
from glossary.models import Term, TermVersion
from glossary.services import admin_page_size, term_summary
from glossary.translations import resolve_term

from .models import Comment, Favorite

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 5000


def _get_term(term_id: int) -> Term:
    term = Term.objects.select_related("active_version").filter(id=int(term_id)).first()
    if term is None:
        raise NotFound("Term not found.")
    return term


def _clean_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        raise ValidationFailed("Comment is empty", general=["Comment text is required."])
    if len(text) > COMMENT_MAX_LENGTH:
        raise ValidationFailed(
            "Comment is too long",
            general=[f"Comment must be at most {COMMENT_MAX_LENGTH} characters."],
        )
    return text


def _author(user) -> dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.id,
        "full_name": user.full_name or "",
        "is_admin": bool(getattr(user, "is_admin", False)),
    }


def comment_payload(comment: Comment, *, responses=None) -> dict[str, Any]:
    return {
        "id": comment.id,
        "term_id": comment.term_id,
        "parent_id": comment.parent_id,
        "author": _author(comment.user),
        "content": comment.content,
        "is_closed": comment.is_closed,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "responses": [comment_payload(r) for r in (responses or [])],
    }


# Favorites


def list_favorites(user, locale: str | None = None) -> list[dict[str, Any]]:
    qs = (
        Favorite.objects.filter(user=user, term__active_version__status=TermVersion.Status.PUBLISHED)
        .select_related("term", "term__category", "term__active_version")
        .prefetch_related(
            "term__active_version__translations__language",
            "term__category__translations__language",
            "term__labels__translations__language",
        )
    )
    return [term_summary(f.term, locale) for f in qs]


def add_favorite(user, term_id: int) -> bool:
    term = _visible_term(user, term_id)
    _obj, created = Favorite.objects.get_or_create(user=user, term=term)
    return created


def remove_favorite(user, term_id: int) -> bool:
    deleted, _ = Favorite.objects.filter(user=user, term_id=int(term_id)).delete()
    return bool(deleted)


def is_favorited(user, term_id: int) -> bool:
    return Favorite.objects.filter(user=user, term_id=int(term_id)).exists()


# Comments


def _visible_responses(comment: Comment) -> list[Comment]:
    return [r for r in comment.responses.all() if not r.is_deleted]


def _is_admin(user) -> bool:
    return bool(user is not None and getattr(user, "is_active", False) and getattr(user, "is_admin", False))


def _visible_term(user, term_id: int) -> Term:
    """Terms without a published active version exist only for admins."""
    term = _get_term(term_id)
    if not _is_admin(user) and not (
        term.active_version_id and term.active_version.status == TermVersion.Status.PUBLISHED
    ):
        raise NotFound("Term not found.")
    return term


def comments_for_term(user, term_id: int) -> list[dict[str, Any]]:
    """Comment threads on a term. Regular users only see their own comments."""
    term = _visible_term(user, term_id)
    qs = Comment.objects.filter(term=term, parent__isnull=True, is_deleted=False)
    if not _is_admin(user):
        qs = qs.filter(user=user)
    qs = qs.select_related("user").prefetch_related("responses__user").order_by("-created_at", "-id")
    out = []
    for c in qs:
        responses = sorted(_visible_responses(c), key=lambda r: (r.created_at, r.id))
        out.append(comment_payload(c, responses=responses))
    return out


def add_comment(user, term_id: int, content: str) -> Comment:
    term = _visible_term(user, term_id)
    comment = Comment.objects.create(user=user, term=term, content=_clean_content(content))
    logger.info("Comment added", extra={"comment_id": comment.id, "term_id": term.id, "user_id": user.id})
    return comment


def _get_comment(comment_id: int) -> Comment:
    comment = Comment.objects.filter(id=int(comment_id), is_deleted=False).first()
    if comment is None:
        raise NotFound("Comment not found.")
    return comment


def delete_comment(user, comment_id: int) -> Comment:
    comment = _get_comment(comment_id)
    if comment.user_id != user.id:
        raise AuthorizationDenied("You can only delete your own comments.")
    comment.is_deleted = True
    comment.save(update_fields=["is_deleted", "updated_at"])
    return comment


def add_admin_response(admin, comment_id: int, content: str) -> Comment:
    parent = _get_comment(comment_id)
    # Responses hang off the top-level comment.
    if parent.parent_id is not None:
        parent = _get_comment(parent.parent_id)
    text = _clean_content(content)
    with transaction.atomic():
        response = Comment.objects.create(user=admin, term_id=parent.term_id, parent=parent, content=text)
    logger.info("Admin response added", extra={"comment_id": parent.id, "response_id": response.id})
    return response


def toggle_comment_closed(comment_id: int) -> Comment:
    comment = _get_comment(comment_id)
    comment.is_closed = not comment.is_closed
    comment.save(update_fields=["is_closed", "updated_at"])
    return comment


def comments_for_admin(
    status: str = "all",
    page: int = 1,
    page_size: int | None = None,
    *,
    locale: str | None = None,
) -> dict[str, Any]:
    status = (status or "all").strip().lower()
    if status not in {"all", "open", "closed"}:
        raise ValidationFailed(general=[f"Unknown comment status: {status}."])
    page = max(1, int(page or 1))
    page_size = max(1, int(page_size or admin_page_size()))

    qs = Comment.objects.filter(parent__isnull=True, is_deleted=False)
    if status == "open":
        qs = qs.filter(is_closed=False)
    elif status == "closed":
        qs = qs.filter(is_closed=True)
    qs = (
        qs.select_related("user", "term", "term__active_version")
        .prefetch_related("responses__user", "term__active_version__translations__language")
        .order_by("-created_at", "-id")
    )

    total = qs.count()
    start = (page - 1) * page_size
    items = []
    for c in qs[start: start + page_size]:
        responses = sorted(_visible_responses(c), key=lambda r: (r.created_at, r.id))
        row = comment_payload(c, responses=responses)
        row["term_name"] = resolve_term(c.term, locale).name
        row["term_identifier"] = c.term.identifier
        items.append(row)
    return {"items": items, "total": total, "page": page, "page_size": page_size}
