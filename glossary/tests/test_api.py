import json

from django.test import TestCase

from glossary.models import TermVersion

from .helpers import make_category, make_languages, make_term, make_user, sign_in

Status = TermVersion.Status


class PublicApiTests(TestCase):
    def setUp(self):
        make_languages()
        self.category = make_category()
        self.term, self.v1 = make_term(self.category, en_description="Hard tissue")

    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_search(self):
        response = self.client.get("/api/glossary/terms", {"q": "tooth", "lang": "en"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data["has_more"])
        self.assertEqual(data["terms"][0]["name"], "Tooth")
        self.assertEqual(data["terms"][0]["category_name"], "Anatomy")

    def test_locale_from_query(self):
        response = self.client.get(f"/api/glossary/terms/{self.term.id}", {"lang": "lv"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Zobs")

    def test_unknown_term_is_structured_404(self):
        response = self.client.get("/api/glossary/terms/999999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "not_found")

    def test_categories_and_languages(self):
        self.assertEqual(self.client.get("/api/glossary/categories").status_code, 200)
        languages = self.client.get("/api/glossary/languages").json()
        self.assertEqual([lang["code"] for lang in languages], ["lv", "en"])


class AdminGateTests(TestCase):
    def setUp(self):
        make_languages()

    def test_anonymous_is_denied(self):
        response = self.client.get("/api/admin/glossary/dashboard")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "authorization_denied")

    def test_anonymous_write_is_denied_and_changes_nothing(self):
        term, version = make_term(make_category())
        response = self.client.post(f"/api/admin/glossary/versions/{version.id}/drafts")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "authorization_denied")
        self.assertEqual(term.versions.count(), 1)

    def test_other_admin_routers_use_the_same_denial(self):
        for url in ("/api/admin/users", "/api/admin/community/comments"):
            response = self.client.get(url)
            self.assertEqual(response.status_code, 403)
            self.assertEqual(response.json()["code"], "authorization_denied")

    def test_regular_user_is_denied(self):
        sign_in(self.client, make_user())
        response = self.client.get("/api/admin/glossary/dashboard")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "authorization_denied")

    def test_admin_is_allowed(self):
        sign_in(self.client, make_user("admin@example.com", is_admin=True))
        response = self.client.get("/api/admin/glossary/dashboard")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["users"], 1)

    def test_disabled_admin_is_denied(self):
        admin = make_user("admin@example.com", is_admin=True)
        admin.is_active = False
        admin.save()
        sign_in(self.client, admin)
        response = self.client.get("/api/admin/glossary/dashboard")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "authorization_denied")


class AdminEditingApiTests(TestCase):
    def setUp(self):
        make_languages()
        self.category = make_category()
        self.term, self.v1 = make_term(self.category)
        self.admin = make_user("admin@example.com", is_admin=True)
        sign_in(self.client, self.admin)

    def _put(self, url, payload):
        return self.client.put(url, data=json.dumps(payload), content_type="application/json")

    def _post(self, url, payload=None):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json")

    def test_load_for_edit_reports_mode(self):
        url = f"/api/admin/glossary/versions/{self.v1.id}/edit"
        data = self.client.get(url).json()
        self.assertEqual(data["edit_mode"], "notEditable")
        self.assertEqual(len(data["translations"]), 2)

        data = self.client.get(url, {"mode": "createFromSource"}).json()
        self.assertEqual(data["edit_mode"], "createFromSource")
        self.assertEqual(TermVersion.objects.filter(term=self.term).count(), 1)

    def test_edit_published_without_hint_is_conflict(self):
        response = self._put(
            f"/api/admin/glossary/versions/{self.v1.id}",
            {"translations": {"lv": {"name": "Cits"}}},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "illegal_transition")

    def test_edit_published_with_hint_forks(self):
        response = self._put(
            f"/api/admin/glossary/versions/{self.v1.id}",
            {"translations": {"lv": {"name": "Zobs", "description": "Jauns"}}, "mode": "createFromSource"},
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["edit_mode"], "createFromSource")
        self.assertEqual(data["version"]["status"], Status.DRAFT)
        self.assertEqual(data["version"]["version_number"], 2)
        self.assertFalse(data["version"]["is_active"])

    def test_validation_error_payload(self):
        draft = TermVersion.objects.get(id=self._post(f"/api/admin/glossary/versions/{self.v1.id}/drafts").json()["id"])
        response = self._put(
            f"/api/admin/glossary/versions/{draft.id}",
            {"translations": {"en": {"name": ""}}},
        )
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertEqual(data["code"], "validation_failed")
        self.assertEqual(data["fields"], {"en": {"name": "Name is required."}})

    def test_duplicate_draft_is_conflict(self):
        self.assertEqual(self._post(f"/api/admin/glossary/versions/{self.v1.id}/drafts").status_code, 200)
        response = self._post(f"/api/admin/glossary/versions/{self.v1.id}/drafts")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["code"], "editorial_conflict")

    def test_publish_flow(self):
        draft_id = self._post(f"/api/admin/glossary/versions/{self.v1.id}/drafts").json()["id"]

        response = self._post(f"/api/admin/glossary/versions/{draft_id}/publish")
        self.assertEqual(response.status_code, 409)

        self.assertEqual(self._put(f"/api/admin/glossary/versions/{draft_id}/ready", {"ready": True}).status_code, 200)
        response = self._post(f"/api/admin/glossary/versions/{draft_id}/publish")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_active"])

        history = self.client.get(f"/api/admin/glossary/terms/{self.term.identifier}/history").json()
        self.assertEqual(
            [(v["version_number"], v["status"]) for v in history["versions"]],
            [(2, Status.PUBLISHED), (1, Status.ARCHIVED)],
        )

    def test_create_term_and_discard(self):
        response = self._post(
            "/api/admin/glossary/terms",
            {
                "category_id": self.category.id,
                "translations": {"lv": {"name": "Sakne"}, "en": {"name": "Root"}},
            },
        )
        self.assertEqual(response.status_code, 200)
        version_id = response.json()["id"]

        response = self.client.delete(f"/api/admin/glossary/versions/{version_id}")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["term_deleted"])

    def test_pending_count(self):
        self._post(f"/api/admin/glossary/versions/{self.v1.id}/drafts")
        self.assertEqual(self.client.get("/api/admin/glossary/versions/pending-count").json(), {"count": 1})

    def test_labels_roundtrip(self):
        label_id = self._post("/api/admin/glossary/labels", {"names": {"en": "Common"}}).json()["id"]
        response = self._post(f"/api/admin/glossary/terms/{self.term.id}/labels", {"label_id": label_id})
        self.assertEqual(response.json(), {"status": "ok", "changed": True})

        response = self.client.delete(f"/api/admin/glossary/labels/{label_id}")
        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["general"])
