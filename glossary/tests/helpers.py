from __future__ import annotations

from django.contrib.auth import get_user_model

from accounts.jwt_utils import issue_access_token
from glossary import services
from glossary.models import Language
from glossary.versions import create_term


def make_languages():
    lv = Language.objects.create(code="lv", name="Latvian", is_default=True)
    en = Language.objects.create(code="en", name="English")
    return lv, en


def make_category(lv: str = "Anatomija", en: str = "Anatomy"):
    return services.create_category({"lv": lv, "en": en})


def make_term(category, lv_name="Zobs", en_name="Tooth", *, lv_description="", en_description="", publish=True):
    version = create_term(
        category_id=category.id,
        translations_by_language={
            "lv": {"name": lv_name, "description": lv_description},
            "en": {"name": en_name, "description": en_description},
        },
        publish=publish,
    )
    return version.term, version


def make_user(email="user@example.com", *, is_admin=False, password="secret-pass-1"):
    return get_user_model().objects.create_user(email=email, password=password, is_admin=is_admin)


def sign_in(client, user) -> None:
    client.cookies["access_token"] = issue_access_token(user_id=user.id)
