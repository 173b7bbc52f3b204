from django.test import TestCase, override_settings

from api.errors import NotFound, ValidationFailed
from glossary import services, versions
from glossary.models import Category, Label, TermLabel

from .helpers import make_category, make_languages, make_term


class PublicBrowsingTests(TestCase):
    def setUp(self):
        make_languages()
        self.category = make_category()
        self.crown, _ = make_term(self.category, "Kronis", "Crown", en_description="Covers the tooth")
        self.filling, _ = make_term(
            self.category, "Plomba", "Filling", en_description="Often placed under a crown"
        )
        self.gum, _ = make_term(make_category("Periodontoloģija", "Periodontology"), "Smaganas", "Gum")

    def _ids(self, page):
        return [t["id"] for t in page["terms"]]

    def test_empty_query_returns_newest_first(self):
        page = services.search_terms("", locale="en")
        self.assertEqual(self._ids(page), [self.gum.id, self.filling.id, self.crown.id])
        self.assertFalse(page["has_more"])

    def test_every_word_must_match(self):
        self.assertEqual(self._ids(services.search_terms("covers tooth", locale="en")), [self.crown.id])
        self.assertEqual(self._ids(services.search_terms("covers gum", locale="en")), [])

    def test_search_is_case_insensitive_and_spans_languages(self):
        self.assertEqual(self._ids(services.search_terms("SMAGANAS", locale="en")), [self.gum.id])

    def test_name_matches_rank_first(self):
        page = services.search_terms("crown", locale="en")
        self.assertEqual(self._ids(page), [self.crown.id, self.filling.id])

    @override_settings(GLOSSARY_PAGE_SIZE=2)
    def test_pagination_has_more(self):
        first = services.recent_terms(0, locale="en")
        self.assertEqual(len(first["terms"]), 2)
        self.assertTrue(first["has_more"])
        self.assertEqual(first["next_skip"], 2)

        second = services.recent_terms(first["next_skip"], locale="en")
        self.assertEqual(self._ids(second), [self.crown.id])
        self.assertFalse(second["has_more"])

    def test_drafts_are_not_public(self):
        make_term(self.category, "Sakne", "Root", publish=False)
        names = [t["name"] for t in services.recent_terms(0, locale="en")["terms"]]
        self.assertNotIn("Root", names)

    def test_summary_resolves_locale(self):
        term = services.term_detail(self.crown.id, locale="lv")
        self.assertEqual(term["name"], "Kronis")
        self.assertEqual(term["category_name"], "Anatomija")
        self.assertEqual(len(term["translations"]), 2)

    def test_terms_by_category_matches_any_language(self):
        page = services.terms_by_category("periodontology", locale="en")
        self.assertEqual(self._ids(page), [self.gum.id])
        self.assertEqual(services.terms_by_category("Nothing here")["terms"], [])

    def test_categories_sorted_by_resolved_name(self):
        names = [c["name"] for c in services.list_categories("en")]
        self.assertEqual(names, ["Anatomy", "Periodontology"])

    def test_languages(self):
        codes = [lang["code"] for lang in services.list_languages()]
        self.assertEqual(codes, ["lv", "en"])


class CategoryServiceTests(TestCase):
    def setUp(self):
        make_languages()

    def test_required_languages(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.create_category({"lv": "Anatomija"})
        self.assertEqual(ctx.exception.fields, {"en": {"name": "Name is required."}})

    @override_settings(GLOSSARY_REQUIRED_LANGUAGE_CODES=["lv"])
    def test_required_languages_follow_term_rules(self):
        services.create_category({"lv": "Anatomija"})
        with self.assertRaises(ValidationFailed) as ctx:
            versions.clean_translations({"en": {"name": "Tooth"}})
        self.assertEqual(ctx.exception.fields, {"lv": {"name": "Name is required."}})

    def test_name_length_matches_term_names(self):
        long_name = "x" * (versions.NAME_MAX_LENGTH + 1)
        with self.assertRaises(ValidationFailed) as category_ctx:
            services.create_category({"lv": long_name, "en": "Anatomy"})
        with self.assertRaises(ValidationFailed) as term_ctx:
            versions.clean_translations({"lv": {"name": long_name}, "en": {"name": "Tooth"}})
        self.assertEqual(category_ctx.exception.fields, term_ctx.exception.fields)

    def test_update_category(self):
        category = make_category()
        services.update_category(category.id, {"lv": "Anatomija", "en": "Human anatomy"})
        names = [c["name"] for c in services.list_categories("en")]
        self.assertEqual(names, ["Human anatomy"])

    def test_delete_refused_while_in_use(self):
        category = make_category()
        make_term(category)
        with self.assertRaises(ValidationFailed):
            services.delete_category(category.id)

    def test_delete_unused(self):
        category = make_category()
        services.delete_category(category.id)
        self.assertFalse(Category.objects.filter(id=category.id).exists())

    def test_move_term_to_other_category(self):
        term, _ = make_term(make_category())
        other = make_category("Ortodontija", "Orthodontics")
        services.set_term_category(term.id, other.id)
        term.refresh_from_db()
        self.assertEqual(term.category_id, other.id)


class LabelServiceTests(TestCase):
    def setUp(self):
        make_languages()
        self.term, _ = make_term(make_category())

    def test_create_label_rejects_blank_names(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.create_label({"lv": "", "en": "Common"})
        self.assertIn("lv", ctx.exception.fields)

    def test_create_label_needs_a_name(self):
        with self.assertRaises(ValidationFailed) as ctx:
            services.create_label({})
        self.assertTrue(ctx.exception.general)

    def test_label_attach_is_idempotent(self):
        label = services.create_label({"en": "Common"})
        self.assertTrue(services.add_label_to_term(self.term.id, label.id))
        self.assertFalse(services.add_label_to_term(self.term.id, label.id))
        self.assertEqual(TermLabel.objects.filter(term=self.term).count(), 1)

        self.assertTrue(services.remove_label_from_term(self.term.id, label.id))
        self.assertFalse(services.remove_label_from_term(self.term.id, label.id))

    def test_attach_unknown_label(self):
        with self.assertRaises(NotFound):
            services.add_label_to_term(self.term.id, 424242)

    def test_term_labels_sorted_by_name(self):
        zeta = services.create_label({"en": "Zeta"})
        alpha = services.create_label({"en": "alpha"})
        services.add_label_to_term(self.term.id, zeta.id)
        services.add_label_to_term(self.term.id, alpha.id)
        self.assertEqual([lb["name"] for lb in services.term_labels(self.term.id, "en")], ["alpha", "Zeta"])

    def test_label_placeholder_name(self):
        label = Label.objects.create()
        self.assertEqual(services.labels_for_select("en"), [{"id": label.id, "name": f"Label {label.id}"}])

    def test_list_labels_with_usage(self):
        used = services.create_label({"en": "Common"})
        services.create_label({"en": "Rare"})
        services.add_label_to_term(self.term.id, used.id)

        page = services.list_labels(1, 10, "", locale="en")
        self.assertEqual(page["total"], 2)
        self.assertEqual([(lb["name"], lb["usage_count"]) for lb in page["labels"]], [("Common", 1), ("Rare", 0)])

        self.assertEqual(services.list_labels(1, 10, "rar")["total"], 1)

    def test_delete_label_in_use(self):
        label = services.create_label({"en": "Common"})
        services.add_label_to_term(self.term.id, label.id)
        with self.assertRaises(ValidationFailed):
            services.delete_label(label.id)


class ManagedVersionsTests(TestCase):
    def setUp(self):
        make_languages()
        category = make_category()
        self.term, self.v1 = make_term(category)
        self.other, _ = make_term(category, "Smaganas", "Gum")
        self.draft = versions.create_draft_from(self.v1.id)

    def test_filter_by_status(self):
        page = services.managed_versions(status="draft", locale="en")
        self.assertEqual(page["total"], 1)
        self.assertEqual(page["items"][0]["id"], self.draft.id)
        self.assertFalse(page["items"][0]["is_active"])

    def test_query_matches_names(self):
        page = services.managed_versions(query="gum", locale="en")
        self.assertEqual(page["total"], 1)

    def test_unknown_status(self):
        with self.assertRaises(ValidationFailed):
            services.managed_versions(status="rejected")

    def test_counts(self):
        self.assertEqual(services.pending_count(), 1)
        counts = services.dashboard_counts()
        self.assertEqual(counts["pending_drafts"], 1)
        self.assertEqual(counts["published_terms"], 2)
