from __future__ import annotations

from django.contrib import admin

from .models import Comment, Favorite


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ("user", "term", "created_at")
    search_fields = ("user__email", "term__identifier")
    ordering = ("-created_at",)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("id", "term", "user", "parent", "is_closed", "is_deleted", "created_at")
    list_filter = ("is_closed", "is_deleted")
    search_fields = ("content", "user__email", "term__identifier")
    raw_id_fields = ("term", "user", "parent")
    ordering = ("-created_at",)
