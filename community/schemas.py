from __future__ import annotations

from datetime import datetime

from ninja import Schema


class CommentIn(Schema):
    content: str


class AuthorOut(Schema):
    id: int
    full_name: str = ""
    is_admin: bool = False


class ResponseOut(Schema):
    id: int
    term_id: int
    parent_id: int | None = None
    author: AuthorOut | None = None
    content: str
    is_closed: bool
    created_at: datetime
    updated_at: datetime


class CommentOut(ResponseOut):
    responses: list[ResponseOut] = []


class AdminCommentOut(CommentOut):
    term_name: str
    term_identifier: str


class AdminCommentListOut(Schema):
    items: list[AdminCommentOut]
    total: int
    page: int
    page_size: int


class FavoriteStateOut(Schema):
    term_id: int
    is_favorite: bool
