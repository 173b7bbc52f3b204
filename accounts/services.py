from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from api.errors import NotFound, ValidationFailed
from community.models import Comment, Favorite

logger = logging.getLogger(__name__)

User = get_user_model()

ROLE_FILTERS = {"all", "admin", "user"}


def serialize_user(user) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name or "",
        "is_admin": bool(user.is_admin),
        "is_disabled": user.is_disabled,
        "date_joined": user.date_joined,
    }


def list_users(page: int = 1, limit: int = 10, search: str | None = None, role: str | None = None) -> dict[str, Any]:
    page = max(1, int(page or 1))
    limit = max(1, min(int(limit or 10), 100))
    role = (role or "all").strip().lower()
    if role not in ROLE_FILTERS:
        raise ValidationFailed(general=[f"Unknown role filter: {role}."])

    qs = User.objects.all()
    q = (search or "").strip()
    if q:
        qs = qs.filter(Q(email__icontains=q) | Q(full_name__icontains=q))
    if role == "admin":
        qs = qs.filter(is_admin=True)
    elif role == "user":
        qs = qs.filter(is_admin=False)

    total = qs.count()
    start = (page - 1) * limit
    return {
        "users": [serialize_user(u) for u in qs[start: start + limit]],
        "total": total,
        "page": page,
        "limit": limit,
    }


def _get_user(user_id: int):
    user = User.objects.filter(id=int(user_id)).first()
    if user is None:
        raise NotFound("User not found.")
    return user


def _refuse_self(actor, target, message: str) -> None:
    if actor is not None and actor.id == target.id:
        raise ValidationFailed(message, general=[message])


def update_user_role(actor, user_id: int, make_admin: bool):
    user = _get_user(user_id)
    if not make_admin:
        _refuse_self(actor, user, "You cannot remove your own admin role.")
    user.is_admin = bool(make_admin)
    user.save(update_fields=["is_admin", "updated_at"])
    logger.info("User role changed", extra={"user_id": user.id, "is_admin": user.is_admin, "actor_id": actor.id})
    return user


def update_user_status(actor, user_id: int, disable: bool):
    user = _get_user(user_id)
    if disable:
        _refuse_self(actor, user, "You cannot disable your own account.")
    user.is_active = not disable
    user.save(update_fields=["is_active", "updated_at"])
    logger.info("User status changed", extra={"user_id": user.id, "disabled": bool(disable), "actor_id": actor.id})
    return user


def delete_user(actor, user_id: int) -> None:
    user = _get_user(user_id)
    _refuse_self(actor, user, "You cannot delete your own account.")
    with transaction.atomic():
        Comment.objects.filter(user=user).update(is_deleted=True)
        Favorite.objects.filter(user=user).delete()
        user.delete()
    logger.info("User deleted", extra={"user_id": int(user_id), "actor_id": actor.id})
