from __future__ import annotations

from django.conf import settings
from django.db import models


class Language(models.Model):
    code = models.CharField(max_length=8, unique=True)
    name = models.CharField(max_length=100)
    is_default = models.BooleanField(default=False)
    is_enabled = models.BooleanField(default=True)

    class Meta:
        ordering = ["-is_default", "name"]

    def __str__(self) -> str:
        return self.code


class Category(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return f"category:{self.id}"


class CategoryTranslation(models.Model):
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="translations",
    )
    language = models.ForeignKey(
        Language,
        on_delete=models.PROTECT,
        related_name="category_translations",
    )
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["language_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["category", "language"],
                name="uniq_category_translation_language",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.language_id}]"


class Label(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"label:{self.id}"


class LabelTranslation(models.Model):
    label = models.ForeignKey(
        Label,
        on_delete=models.CASCADE,
        related_name="translations",
    )
    language = models.ForeignKey(
        Language,
        on_delete=models.PROTECT,
        related_name="label_translations",
    )
    name = models.CharField(max_length=255)

    class Meta:
        ordering = ["language_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["label", "language"],
                name="uniq_label_translation_language",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.language_id}]"


class Term(models.Model):
    identifier = models.CharField(max_length=100, unique=True)
    category = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="terms",
    )
    # Only Version Store publish/restore may move this pointer.
    active_version = models.ForeignKey(
        "TermVersion",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    labels = models.ManyToManyField(
        Label,
        through="TermLabel",
        related_name="terms",
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.identifier


class TermVersion(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PUBLISHED = "PUBLISHED", "Published"
        ARCHIVED = "ARCHIVED", "Archived"

    term = models.ForeignKey(
        Term,
        on_delete=models.CASCADE,
        related_name="versions",
    )
    version_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.DRAFT,
    )
    ready_to_publish = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="term_versions",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    published_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["term_id", "-version_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["term", "version_number"],
                name="uniq_term_version_number",
            ),
            models.UniqueConstraint(
                fields=["term"],
                condition=models.Q(status="DRAFT"),
                name="uniq_open_draft_per_term",
            ),
            models.UniqueConstraint(
                fields=["term"],
                condition=models.Q(status="PUBLISHED"),
                name="uniq_published_version_per_term",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="glossary_tv_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.term_id}:v{self.version_number} ({self.status})"

    @property
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT


class TermTranslation(models.Model):
    version = models.ForeignKey(
        TermVersion,
        on_delete=models.CASCADE,
        related_name="translations",
    )
    language = models.ForeignKey(
        Language,
        on_delete=models.PROTECT,
        related_name="term_translations",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["language_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["version", "language"],
                name="uniq_term_translation_language",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} [{self.language_id}]"


class TermLabel(models.Model):
    term = models.ForeignKey(Term, on_delete=models.CASCADE, related_name="term_labels")
    label = models.ForeignKey(Label, on_delete=models.CASCADE, related_name="term_labels")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["term", "label"], name="uniq_term_label"),
        ]

    def __str__(self) -> str:
        return f"{self.term_id}:{self.label_id}"
