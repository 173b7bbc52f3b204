import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from glossary.management.commands.import_terms import CategoryCache, ensure_languages
from glossary.models import Category, CategoryTranslation, Language, Label, Term, TermVersion
from glossary.richtext import description_to_markdown
from glossary.translations import resolve_term

XML = """<?xml version="1.0" encoding="UTF-8"?>
<dental_terms>
  <term>
    <category>Anatomija</category>
    <lv_name>Zobs</lv_name>
    <lv_description><![CDATA[<p>Cietie <b>audi</b></p>]]></lv_description>
    <eng_name>Tooth</eng_name>
    <eng_description>Hard tissue</eng_description>
  </term>
  <term>
    <lv_name>Plomba</lv_name>
    <lv_description></lv_description>
    <eng_name>Filling</eng_name>
    <eng_description></eng_description>
  </term>
  <term>
    <category>Anatomija</category>
    <lv_name></lv_name>
    <eng_name></eng_name>
  </term>
</dental_terms>
"""


class ImportTermsTests(TestCase):
    def setUp(self):
        fd, self.path = tempfile.mkstemp(suffix=".xml")
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(XML)
        self.addCleanup(os.remove, self.path)

    def _run(self, *args):
        out, err = StringIO(), StringIO()
        call_command("import_terms", self.path, *args, stdout=out, stderr=err)
        return out.getvalue(), err.getvalue()

    def test_import_publishes_terms(self):
        out, err = self._run()

        self.assertIn("imported=2", out)
        self.assertIn("failed=1", out)
        self.assertIn("#2", err)
        self.assertEqual(Term.objects.count(), 2)
        for term in Term.objects.select_related("active_version"):
            self.assertEqual(term.active_version.status, TermVersion.Status.PUBLISHED)
            self.assertEqual(term.active_version.version_number, 1)

    def test_languages_and_default_category(self):
        self._run()
        self.assertTrue(Language.objects.get(code="lv").is_default)
        self.assertFalse(Language.objects.get(code="en").is_default)
        self.assertTrue(CategoryTranslation.objects.filter(name="VISPĀRĪGI").exists())
        self.assertEqual(Category.objects.count(), 2)

    def test_html_description_becomes_markdown(self):
        self._run()
        term = Term.objects.filter(versions__translations__name="Zobs").get()
        self.assertEqual(resolve_term(term, "lv").description, "Cietie **audi**")

    def test_dry_run_writes_nothing(self):
        out, _ = self._run("--dry-run")
        self.assertIn("terms=3", out)
        self.assertEqual(Term.objects.count(), 0)
        self.assertEqual(Language.objects.count(), 0)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("import_terms", "/nonexistent/terms.xml", stdout=StringIO())

    def test_category_cache_reuses_existing(self):
        lv, en = ensure_languages()
        cache = CategoryCache(lv, en)
        first = cache.get_or_create("Anatomija")
        self.assertEqual(CategoryCache(lv, en).get_or_create("Anatomija"), first)
        self.assertEqual(cache.get_or_create(""), cache.get_or_create("VISPĀRĪGI"))
        self.assertEqual(Category.objects.count(), 2)


class ClearGlossaryTests(TestCase):
    def test_requires_confirmation(self):
        with self.assertRaises(CommandError):
            call_command("clear_glossary", stdout=StringIO())

    def test_clears_content(self):
        lv, en = ensure_languages()
        CategoryCache(lv, en).get_or_create("Anatomija")
        Label.objects.create()
        call_command("clear_glossary", "--yes", stdout=StringIO())
        self.assertEqual(Category.objects.count(), 0)
        self.assertEqual(Label.objects.count(), 0)
        self.assertEqual(Language.objects.count(), 2)


class RichTextTests(TestCase):
    def test_plain_text_passes_through(self):
        self.assertEqual(description_to_markdown("  Hard tissue "), "Hard tissue")

    def test_scripts_are_stripped(self):
        md = description_to_markdown("<p>Safe</p><script>alert(1)</script>")
        self.assertIn("Safe", md)
        self.assertNotIn("<script>", md)
