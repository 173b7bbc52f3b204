from __future__ import annotations

from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.contrib.auth.models import PermissionsMixin
from django.db import models


class UserManager(BaseUserManager):
    def create_user(self, email: str, password: str | None = None, **extra_fields):
        if not email:
            raise ValueError("Email is required")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_admin", True)
        extra_fields.setdefault("is_active", True)
        return self.create_user(email=email, password=password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255, blank=True)

    # is_active=False is the "disabled" state of the back-office user list.
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    # Glossary editor role (back-office), independent of Django admin access.
    is_admin = models.BooleanField(default=False)

    preferences = models.JSONField(blank=True, default=dict)

    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: list[str] = []

    class Meta:
        ordering = ["-is_admin", "full_name", "email"]

    def __str__(self) -> str:
        return self.email

    @property
    def is_disabled(self) -> bool:
        return not self.is_active

    def get_preferred_language(self, default: str = "en") -> str:
        prefs = self.preferences if isinstance(self.preferences, dict) else {}
        code = (prefs.get("ui_language") or "").strip().lower()
        return code or default

    def set_preferred_language(self, language_code: str) -> None:
        prefs = dict(self.preferences) if isinstance(self.preferences, dict) else {}
        prefs["ui_language"] = (language_code or "").strip().lower()
        self.preferences = prefs
        self.save(update_fields=["preferences", "updated_at"])
