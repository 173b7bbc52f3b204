from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from community.models import Comment, Favorite
from glossary.models import Category, Label, Term, TermVersion


class Command(BaseCommand):
    help = "Delete all glossary content: terms, versions, categories, labels, comments and favorites."

    def add_arguments(self, parser):
        parser.add_argument("--yes", action="store_true", help="Confirm deletion.")

    def handle(self, *args, **options):
        if not options.get("yes"):
            raise CommandError("Refusing to delete glossary content without --yes")

        with transaction.atomic():
            counts = {
                "comments": Comment.objects.all().delete()[0],
                "favorites": Favorite.objects.all().delete()[0],
            }
            # Active version pointers go first so versions can be removed.
            Term.objects.update(active_version=None)
            counts["versions"] = TermVersion.objects.all().delete()[0]
            counts["terms"] = Term.objects.all().delete()[0]
            counts["labels"] = Label.objects.all().delete()[0]
            counts["categories"] = Category.objects.all().delete()[0]

        summary = ", ".join(f"{k}={v}" for k, v in counts.items())
        self.stdout.write(self.style.SUCCESS(f"Glossary cleared. {summary}"))
