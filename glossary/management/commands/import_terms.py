from __future__ import annotations

import html
import logging
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, transaction

from api.errors import GlossaryError
from glossary.models import Category, CategoryTranslation, Language
from glossary.richtext import description_to_markdown
from glossary.versions import create_term

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_NAME = "VISPĀRĪGI"
PROGRESS_EVERY = 10


@dataclass(frozen=True)
class XmlTerm:
    index: int
    category: str
    lv_name: str
    lv_description: str
    en_name: str
    en_description: str


def _text(el: ET.Element | None) -> str:
    if el is None:
        return ""
    return html.unescape((el.text or "").strip()).strip()


def iter_xml_terms(root: ET.Element) -> Iterable[XmlTerm]:
    for index, el in enumerate(root.findall("term")):
        yield XmlTerm(
            index=index,
            category=_text(el.find("category")),
            lv_name=_text(el.find("lv_name")),
            lv_description=_text(el.find("lv_description")),
            en_name=_text(el.find("eng_name")),
            en_description=_text(el.find("eng_description")),
        )


def ensure_languages() -> tuple[Language, Language]:
    lv, _ = Language.objects.get_or_create(
        code="lv", defaults={"name": "Latvian", "is_default": True, "is_enabled": True}
    )
    en, _ = Language.objects.get_or_create(
        code="en", defaults={"name": "English", "is_default": False, "is_enabled": True}
    )
    return lv, en


class CategoryCache:
    """Category lookups by Latvian name for one import run."""

    def __init__(self, lv: Language, en: Language) -> None:
        self.lv = lv
        self.en = en
        self._ids: dict[str, int] = {}
        self.created = 0

    def get_or_create(self, name: str) -> int:
        name = (name or "").strip() or DEFAULT_CATEGORY_NAME
        cached = self._ids.get(name)
        if cached is not None:
            return cached

        existing = CategoryTranslation.objects.filter(language=self.lv, name=name).first()
        if existing is not None:
            self._ids[name] = existing.category_id
            return existing.category_id

        with transaction.atomic():
            category = Category.objects.create()
            # No English source name in the feed; reuse the Latvian one.
            CategoryTranslation.objects.bulk_create(
                [
                    CategoryTranslation(category=category, language=self.lv, name=name),
                    CategoryTranslation(category=category, language=self.en, name=name),
                ]
            )
        self._ids[name] = category.id
        self.created += 1
        return category.id


def _translations(item: XmlTerm) -> dict[str, dict[str, str]]:
    out: dict[str, dict[str, str]] = {}
    if item.lv_name:
        out["lv"] = {"name": item.lv_name, "description": description_to_markdown(item.lv_description)}
    if item.en_name:
        out["en"] = {"name": item.en_name, "description": description_to_markdown(item.en_description)}
    return out


class Command(BaseCommand):
    help = "Import dental terms from an XML file (<dental_terms><term>...</term></dental_terms>)."

    def add_arguments(self, parser):
        parser.add_argument("xml_path", help="Path to the XML file.")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Parse and count terms without writing to the database.",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Import at most this many terms.",
        )

    def handle(self, *args, **options):
        path = Path(options["xml_path"])
        dry_run: bool = bool(options.get("dry_run"))
        limit_opt = options.get("limit")
        limit: int | None = int(limit_opt) if limit_opt is not None else None
        if limit is not None and limit < 1:
            raise CommandError("--limit must be a positive number")

        if not path.is_file():
            raise CommandError(f"File not found: {path}")

        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as exc:
            raise CommandError(f"Invalid XML: {exc}")

        if root.tag != "dental_terms":
            raise CommandError(f"Unexpected root element <{root.tag}>, expected <dental_terms>")

        items = list(iter_xml_terms(root))
        if limit is not None:
            items = items[:limit]
        self.stdout.write(f"Found {len(items)} terms in {path}")

        if dry_run:
            categories = {(i.category or DEFAULT_CATEGORY_NAME) for i in items}
            self.stdout.write(
                self.style.SUCCESS(f"Dry run: terms={len(items)}, categories={len(categories)} (nothing written)")
            )
            return

        lv, en = ensure_languages()
        cache = CategoryCache(lv, en)
        for item in items:
            cache.get_or_create(item.category)

        stamp = int(time.time() * 1000)
        imported = 0
        failed = 0
        for item in items:
            try:
                create_term(
                    category_id=cache.get_or_create(item.category),
                    translations_by_language=_translations(item),
                    identifier=f"term_{item.index}_{stamp}",
                    publish=True,
                    enforce_required=False,
                )
            except (GlossaryError, DatabaseError, ValueError) as exc:
                failed += 1
                logger.exception("Failed to import term", extra={"index": item.index})
                self.stderr.write(self.style.WARNING(f"Term #{item.index} skipped: {exc}"))
                continue

            imported += 1
            if imported % PROGRESS_EVERY == 0:
                self.stdout.write(f"Imported {imported}/{len(items)} terms...")

        self.stdout.write(
            self.style.SUCCESS(
                f"Import finished. imported={imported}, failed={failed}, categories_created={cache.created}"
            )
        )
