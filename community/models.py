from __future__ import annotations

from django.conf import settings
from django.db import models


class Favorite(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="favorites",
    )
    term = models.ForeignKey(
        "glossary.Term",
        on_delete=models.CASCADE,
        related_name="favorites",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "term"], name="uniq_favorite_user_term"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}:{self.term_id}"


class Comment(models.Model):
    # Nullable so comments of deleted users stay in the thread as soft-deleted rows.
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="comments",
    )
    term = models.ForeignKey(
        "glossary.Term",
        on_delete=models.CASCADE,
        related_name="comments",
    )
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="responses",
    )
    content = models.TextField()
    is_closed = models.BooleanField(default=False)
    is_deleted = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["term", "created_at"], name="community_comment_term_idx"),
        ]

    def __str__(self) -> str:
        return f"comment:{self.id}"

    @property
    def is_response(self) -> bool:
        return self.parent_id is not None
