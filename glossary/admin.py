from __future__ import annotations

from django.contrib import admin

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


@admin.register(Language)
class LanguageAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_default", "is_enabled")
    list_filter = ("is_enabled",)
    search_fields = ("code", "name")


class CategoryTranslationInline(admin.TabularInline):
    model = CategoryTranslation
    extra = 0


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "created_at", "updated_at")
    search_fields = ("translations__name",)
    inlines = [CategoryTranslationInline]


class LabelTranslationInline(admin.TabularInline):
    model = LabelTranslation
    extra = 0


@admin.register(Label)
class LabelAdmin(admin.ModelAdmin):
    list_display = ("id", "created_at", "updated_at")
    search_fields = ("translations__name",)
    inlines = [LabelTranslationInline]


class TermLabelInline(admin.TabularInline):
    model = TermLabel
    extra = 0


class TermVersionInline(admin.TabularInline):
    model = TermVersion
    extra = 0
    show_change_link = True
    fields = ("version_number", "status", "ready_to_publish", "created_at", "published_at", "archived_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Term)
class TermAdmin(admin.ModelAdmin):
    list_display = ("identifier", "category", "active_version", "created_at")
    list_filter = ("category",)
    search_fields = ("identifier", "versions__translations__name")
    # Only publish/restore move the active pointer.
    readonly_fields = ("active_version", "created_at", "updated_at")
    inlines = [TermVersionInline, TermLabelInline]


class TermTranslationInline(admin.StackedInline):
    model = TermTranslation
    extra = 0


@admin.register(TermVersion)
class TermVersionAdmin(admin.ModelAdmin):
    list_display = ("term", "version_number", "status", "ready_to_publish", "created_at", "published_at")
    list_filter = ("status", "ready_to_publish")
    search_fields = ("term__identifier", "translations__name")
    readonly_fields = ("term", "version_number", "status", "created_at", "published_at", "archived_at")
    inlines = [TermTranslationInline]
