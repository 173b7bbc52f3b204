from __future__ import annotations

from datetime import datetime

from ninja import Schema


class TranslationIn(Schema):
    name: str = ""
    description: str | None = None


class TranslationOut(Schema):
    language_code: str
    name: str
    description: str = ""


class CategoryRefOut(Schema):
    id: int
    name: str


class LabelRefOut(Schema):
    id: int
    name: str


class TermOut(Schema):
    id: int
    identifier: str
    name: str
    description: str = ""
    language_code: str = ""
    category: CategoryRefOut | None = None
    category_name: str
    labels: list[LabelRefOut] = []
    version_id: int | None = None
    version_number: int | None = None
    published_at: datetime | None = None


class TermDetailOut(TermOut):
    translations: list[TranslationOut] = []


class TermPageOut(Schema):
    terms: list[TermOut]
    has_more: bool
    next_skip: int


class CategoryOut(Schema):
    id: int
    name: str
    term_count: int = 0
    translations: dict[str, str] = {}


class LanguageOut(Schema):
    code: str
    name: str
    is_default: bool


# Admin


class NamesIn(Schema):
    names: dict[str, str]


class CreateTermIn(Schema):
    category_id: int
    translations: dict[str, TranslationIn]
    label_ids: list[int] = []


class EditVersionIn(Schema):
    translations: dict[str, TranslationIn]
    mode: str | None = None


class ReadyIn(Schema):
    ready: bool = True


class PublishIn(Schema):
    force: bool = False


class LabelAttachIn(Schema):
    label_id: int


class CategoryAssignIn(Schema):
    category_id: int


class VersionSummaryOut(Schema):
    id: int
    term_id: int
    identifier: str
    version_number: int
    status: str
    ready_to_publish: bool
    is_active: bool
    name: str
    category_name: str
    created_at: datetime
    published_at: datetime | None = None
    archived_at: datetime | None = None


class VersionDetailOut(VersionSummaryOut):
    category_id: int | None = None
    translations: list[TranslationOut] = []
    labels: list[LabelRefOut] = []


class EditOut(Schema):
    version: VersionDetailOut
    translations: list[TranslationOut]
    edit_mode: str


class SubmitEditOut(Schema):
    edit_mode: str
    version: VersionDetailOut


class VersionHistoryOut(Schema):
    term_id: int
    identifier: str
    term_name: str
    versions: list[VersionSummaryOut]


class ManagedVersionsOut(Schema):
    items: list[VersionSummaryOut]
    total: int
    page: int
    page_size: int


class DiscardOut(Schema):
    status: str
    term_id: int
    term_deleted: bool


class CountOut(Schema):
    count: int


class ChangedOut(Schema):
    status: str
    changed: bool


class CategoryAdminOut(Schema):
    id: int
    name: str
    translations: dict[str, str] = {}


class LabelAdminOut(Schema):
    id: int
    name: str
    translations: dict[str, str] = {}
    usage_count: int = 0


class LabelListOut(Schema):
    labels: list[LabelAdminOut]
    total: int
    page: int
    page_size: int


class DashboardOut(Schema):
    pending_drafts: int
    published_terms: int
    open_comments: int
    labels: int
    users: int
