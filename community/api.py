from __future__ import annotations

from ninja import Router

from accounts.auth import AdminAuth, JWTAuth
from api.i18n import get_request_language_code
from glossary.schemas import TermOut

from . import services
from .schemas import AdminCommentListOut, CommentIn, CommentOut, FavoriteStateOut, ResponseOut

router = Router(tags=["community"])
admin_router = Router(tags=["admin-community"], auth=AdminAuth())
auth = JWTAuth()


@router.get("/favorites", response=list[TermOut], auth=auth)
def list_favorites(request):
    return services.list_favorites(request.auth, get_request_language_code(request))


@router.get("/favorites/{term_id}", response=FavoriteStateOut, auth=auth)
def favorite_state(request, term_id: int):
    return {"term_id": term_id, "is_favorite": services.is_favorited(request.auth, term_id)}


@router.post("/favorites/{term_id}", response=FavoriteStateOut, auth=auth)
def add_favorite(request, term_id: int):
    services.add_favorite(request.auth, term_id)
    return {"term_id": term_id, "is_favorite": True}


@router.delete("/favorites/{term_id}", response=FavoriteStateOut, auth=auth)
def remove_favorite(request, term_id: int):
    services.remove_favorite(request.auth, term_id)
    return {"term_id": term_id, "is_favorite": False}


@router.get("/terms/{term_id}/comments", response=list[CommentOut], auth=auth)
def term_comments(request, term_id: int):
    return services.comments_for_term(request.auth, term_id)


@router.post("/terms/{term_id}/comments", response=CommentOut, auth=auth)
def add_comment(request, term_id: int, payload: CommentIn):
    return services.comment_payload(services.add_comment(request.auth, term_id, payload.content))


@router.delete("/comments/{comment_id}", response=ResponseOut, auth=auth)
def delete_comment(request, comment_id: int):
    return services.comment_payload(services.delete_comment(request.auth, comment_id))


@admin_router.get("/comments", response=AdminCommentListOut)
def admin_comments(request, status: str = "all", page: int = 1, page_size: int | None = None):
    return services.comments_for_admin(status, page, page_size, locale=get_request_language_code(request))


@admin_router.post("/comments/{comment_id}/responses", response=ResponseOut)
def add_response(request, comment_id: int, payload: CommentIn):
    return services.comment_payload(services.add_admin_response(request.auth, comment_id, payload.content))


@admin_router.post("/comments/{comment_id}/toggle-closed", response=ResponseOut)
def toggle_closed(request, comment_id: int):
    return services.comment_payload(services.toggle_comment_closed(comment_id))
