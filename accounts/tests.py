import json

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.jwt_utils import decode_token, issue_refresh_token
from community.models import Comment, Favorite
from glossary.tests.helpers import make_category, make_languages, make_term, make_user, sign_in

User = get_user_model()


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


def put_json(client, url, payload):
    return client.put(url, data=json.dumps(payload), content_type="application/json")


class AuthApiTests(TestCase):
    def test_register_sets_cookies(self):
        response = post_json(
            self.client,
            "/api/auth/register",
            {"email": "New@Example.com", "password": "long-enough-1", "full_name": "Dr. Ozola"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.cookies)
        self.assertIn("refresh_token", response.cookies)
        self.assertTrue(User.objects.filter(email="new@example.com").exists())

    def test_register_short_password(self):
        response = post_json(self.client, "/api/auth/register", {"email": "a@example.com", "password": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_failed")

    def test_register_duplicate_email(self):
        make_user("taken@example.com")
        response = post_json(
            self.client, "/api/auth/register", {"email": "taken@example.com", "password": "long-enough-1"}
        )
        self.assertEqual(response.status_code, 400)

    def test_login(self):
        make_user("user@example.com", password="long-enough-1")
        bad = post_json(self.client, "/api/auth/login", {"email": "user@example.com", "password": "wrong"})
        self.assertEqual(bad.status_code, 401)

        ok = post_json(self.client, "/api/auth/login", {"email": "user@example.com", "password": "long-enough-1"})
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(decode_token(ok.cookies["access_token"].value)["type"], "access")

    def test_refresh_rejects_disabled_user(self):
        user = make_user()
        token = issue_refresh_token(user_id=user.id)
        self.assertEqual(post_json(self.client, "/api/auth/refresh", {"refresh": token}).status_code, 200)

        user.is_active = False
        user.save()
        self.assertEqual(post_json(self.client, "/api/auth/refresh", {"refresh": token}).status_code, 401)

    def test_me_and_language_preference(self):
        user = make_user()
        sign_in(self.client, user)

        me = self.client.get("/api/auth/me").json()
        self.assertEqual(me["email"], "user@example.com")
        self.assertEqual(me["ui_language"], "en")

        response = put_json(self.client, "/api/auth/me/language", {"language": "lv"})
        self.assertEqual(response.json(), {"language": "lv"})
        user.refresh_from_db()
        self.assertEqual(user.preferences["ui_language"], "lv")

        response = put_json(self.client, "/api/auth/me/language", {"language": "de"})
        self.assertEqual(response.status_code, 400)


class AdminUsersApiTests(TestCase):
    def setUp(self):
        self.admin = make_user("admin@example.com", is_admin=True)
        self.user = make_user("user@example.com")
        sign_in(self.client, self.admin)

    def test_list_and_filter(self):
        data = self.client.get("/api/admin/users", {"role": "admin"}).json()
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["users"][0]["email"], "admin@example.com")

        data = self.client.get("/api/admin/users", {"search": "user@"}).json()
        self.assertEqual([u["email"] for u in data["users"]], ["user@example.com"])

    def test_cannot_demote_self(self):
        response = put_json(self.client, f"/api/admin/users/{self.admin.id}/role", {"is_admin": False})
        self.assertEqual(response.status_code, 400)
        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_admin)

    def test_promote_user(self):
        response = put_json(self.client, f"/api/admin/users/{self.user.id}/role", {"is_admin": True})
        self.assertTrue(response.json()["is_admin"])

    def test_disable_user_blocks_access(self):
        response = put_json(self.client, f"/api/admin/users/{self.user.id}/status", {"disabled": True})
        self.assertTrue(response.json()["is_disabled"])

        self.client.cookies.clear()
        sign_in(self.client, self.user)
        self.assertEqual(self.client.get("/api/auth/me").status_code, 401)

    def test_cannot_disable_self(self):
        response = put_json(self.client, f"/api/admin/users/{self.admin.id}/status", {"disabled": True})
        self.assertEqual(response.status_code, 400)

    def test_delete_user_soft_deletes_comments(self):
        make_languages()
        term, _ = make_term(make_category())
        comment = Comment.objects.create(user=self.user, term=term, content="Hello")
        Favorite.objects.create(user=self.user, term=term)

        response = self.client.delete(f"/api/admin/users/{self.user.id}")
        self.assertEqual(response.status_code, 200)

        comment.refresh_from_db()
        self.assertTrue(comment.is_deleted)
        self.assertIsNone(comment.user_id)
        self.assertFalse(Favorite.objects.exists())
        self.assertFalse(User.objects.filter(id=self.user.id).exists())

    def test_cannot_delete_self(self):
        response = self.client.delete(f"/api/admin/users/{self.admin.id}")
        self.assertEqual(response.status_code, 400)
