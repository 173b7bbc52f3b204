from __future__ import annotations

from datetime import datetime

from ninja import Schema


class RegisterIn(Schema):
    email: str
    password: str
    full_name: str | None = None


class LoginIn(Schema):
    email: str
    password: str


class RefreshIn(Schema):
    refresh: str | None = None


class StatusOut(Schema):
    status: str


class MeOut(Schema):
    id: int
    email: str
    full_name: str
    is_admin: bool
    ui_language: str


class MeUpdateIn(Schema):
    full_name: str | None = None


class LanguagePreferenceIn(Schema):
    language: str


class LanguagePreferenceOut(Schema):
    language: str


class UserOut(Schema):
    id: int
    email: str
    full_name: str
    is_admin: bool
    is_disabled: bool
    date_joined: datetime


class UserListOut(Schema):
    users: list[UserOut]
    total: int
    page: int
    limit: int


class UserRoleIn(Schema):
    is_admin: bool


class UserStatusIn(Schema):
    disabled: bool
