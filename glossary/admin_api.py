"""Back-office glossary routes.

Every route here sits behind ``AdminAuth``; handlers assume an admin user in
``request.auth`` and only translate between HTTP and the service layer.
"""
from __future__ import annotations

from ninja import Router

from accounts.auth import AdminAuth
from api.i18n import get_request_language_code

from . import services, versions
from .models import Category, Label
from .schemas import (
    CategoryAdminOut,
    CategoryAssignIn,
    ChangedOut,
    CountOut,
    CreateTermIn,
    DashboardOut,
    DiscardOut,
    EditOut,
    EditVersionIn,
    LabelAdminOut,
    LabelAttachIn,
    LabelListOut,
    LabelRefOut,
    ManagedVersionsOut,
    NamesIn,
    PublishIn,
    ReadyIn,
    SubmitEditOut,
    VersionDetailOut,
    VersionHistoryOut,
)
from .translations import entry_language_code, resolve_category_name, resolve_label_name

router = Router(tags=["admin-glossary"], auth=AdminAuth())


def _version_out(request, version_id: int) -> dict:
    loaded = versions.get_version_for_editing(version_id)
    return services.version_detail(loaded.version, loaded.translations, get_request_language_code(request))


def _category_out(request, category: Category) -> dict:
    return {
        "id": category.id,
        "name": resolve_category_name(category, get_request_language_code(request)),
        "translations": {entry_language_code(t): t.name for t in category.translations.all()},
    }


def _label_out(request, label: Label) -> dict:
    return {
        "id": label.id,
        "name": resolve_label_name(label, get_request_language_code(request)),
        "translations": {entry_language_code(t): t.name for t in label.translations.all()},
        "usage_count": label.term_labels.count(),
    }


@router.get("/dashboard", response=DashboardOut)
def dashboard(request):
    return services.dashboard_counts()


# Versions


@router.get("/versions", response=ManagedVersionsOut)
def managed_versions(
    request,
    status: str = "",
    q: str = "",
    category_id: int | None = None,
    page: int = 1,
    page_size: int | None = None,
):
    return services.managed_versions(
        status=status,
        query=q,
        category_id=category_id,
        page=page,
        page_size=page_size,
        locale=get_request_language_code(request),
    )


@router.get("/versions/pending-count", response=CountOut)
def pending_count(request):
    return {"count": services.pending_count()}


@router.get("/versions/{version_id}/edit", response=EditOut)
def load_for_edit(request, version_id: int, mode: str = ""):
    loaded = versions.load_for_edit(version_id, mode or None)
    locale = get_request_language_code(request)
    return {
        "version": services.version_detail(loaded.version, loaded.translations, locale),
        "translations": services.translations_payload(loaded.translations),
        "edit_mode": loaded.edit_mode.value,
    }


@router.put("/versions/{version_id}", response=SubmitEditOut)
def submit_edit(request, version_id: int, payload: EditVersionIn):
    mode, version = versions.submit_edit(
        version_id,
        payload.translations,
        mode_hint=payload.mode,
        created_by=request.auth,
    )
    return {"edit_mode": mode.value, "version": _version_out(request, version.id)}


@router.post("/versions/{version_id}/drafts", response=VersionDetailOut)
def create_draft(request, version_id: int):
    draft = versions.create_draft_from(version_id, created_by=request.auth)
    return _version_out(request, draft.id)


@router.put("/versions/{version_id}/ready", response=VersionDetailOut)
def set_ready(request, version_id: int, payload: ReadyIn):
    versions.set_ready_to_publish(version_id, payload.ready)
    return _version_out(request, version_id)


@router.post("/versions/{version_id}/publish", response=VersionDetailOut)
def publish(request, version_id: int, payload: PublishIn):
    versions.publish(version_id, force=payload.force)
    return _version_out(request, version_id)


@router.post("/versions/{version_id}/restore", response=VersionDetailOut)
def restore(request, version_id: int):
    versions.restore(version_id)
    return _version_out(request, version_id)


@router.delete("/versions/{version_id}", response=DiscardOut)
def discard_draft(request, version_id: int):
    result = versions.discard_draft(version_id)
    return {"status": "ok", "term_id": result.term_id, "term_deleted": result.term_deleted}


# Terms


@router.post("/terms", response=VersionDetailOut)
def create_term(request, payload: CreateTermIn):
    version = versions.create_term(
        category_id=payload.category_id,
        translations_by_language=payload.translations,
        label_ids=payload.label_ids,
        created_by=request.auth,
    )
    return _version_out(request, version.id)


@router.get("/terms/{identifier}/history", response=VersionHistoryOut)
def version_history(request, identifier: str):
    locale = get_request_language_code(request)
    history = versions.list_version_history(identifier, language_code=locale)
    return {
        "term_id": history.term.id,
        "identifier": history.term.identifier,
        "term_name": history.term_name,
        "versions": [services.version_summary(v, locale) for v in history.versions],
    }


@router.put("/terms/{term_id}/category", response=ChangedOut)
def set_term_category(request, term_id: int, payload: CategoryAssignIn):
    services.set_term_category(term_id, payload.category_id)
    return {"status": "ok", "changed": True}


@router.get("/terms/{term_id}/labels", response=list[LabelRefOut])
def term_labels(request, term_id: int):
    return services.term_labels(term_id, get_request_language_code(request))


@router.post("/terms/{term_id}/labels", response=ChangedOut)
def add_label(request, term_id: int, payload: LabelAttachIn):
    return {"status": "ok", "changed": services.add_label_to_term(term_id, payload.label_id)}


@router.delete("/terms/{term_id}/labels/{label_id}", response=ChangedOut)
def remove_label(request, term_id: int, label_id: int):
    return {"status": "ok", "changed": services.remove_label_from_term(term_id, label_id)}


# Categories


@router.post("/categories", response=CategoryAdminOut)
def create_category(request, payload: NamesIn):
    return _category_out(request, services.create_category(payload.names))


@router.put("/categories/{category_id}", response=CategoryAdminOut)
def update_category(request, category_id: int, payload: NamesIn):
    return _category_out(request, services.update_category(category_id, payload.names))


@router.delete("/categories/{category_id}", response=ChangedOut)
def delete_category(request, category_id: int):
    services.delete_category(category_id)
    return {"status": "ok", "changed": True}


# Labels


@router.get("/labels", response=LabelListOut)
def list_labels(request, page: int = 1, page_size: int | None = None, q: str = ""):
    return services.list_labels(page, page_size, q, locale=get_request_language_code(request))


@router.post("/labels", response=LabelAdminOut)
def create_label(request, payload: NamesIn):
    return _label_out(request, services.create_label(payload.names))


@router.put("/labels/{label_id}", response=LabelAdminOut)
def update_label(request, label_id: int, payload: NamesIn):
    return _label_out(request, services.update_label(label_id, payload.names))


@router.delete("/labels/{label_id}", response=ChangedOut)
def delete_label(request, label_id: int):
    services.delete_label(label_id)
    return {"status": "ok", "changed": True}
