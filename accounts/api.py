from __future__ import annotations

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from ninja import Router
from ninja.errors import HttpError

from api.errors import ValidationFailed
from api.i18n import get_supported_language_codes, normalize_language_code

from . import services
from .auth import AdminAuth, JWTAuth
from .jwt_utils import decode_token, issue_access_token, issue_refresh_token
from .schemas import (
    LanguagePreferenceIn,
    LanguagePreferenceOut,
    LoginIn,
    MeOut,
    MeUpdateIn,
    RefreshIn,
    RegisterIn,
    StatusOut,
    UserListOut,
    UserOut,
    UserRoleIn,
    UserStatusIn,
)

router = Router(tags=["auth"])
admin_router = Router(tags=["admin-users"], auth=AdminAuth())
User = get_user_model()
auth = JWTAuth()

PASSWORD_MIN_LENGTH = 8


def _cookie_samesite() -> str:
    v = (getattr(settings, "AUTH_COOKIE_SAMESITE", "lax") or "lax").lower()
    if v == "strict":
        return "Strict"
    if v == "none":
        return "None"
    return "Lax"


def _cookie_secure(request) -> bool:
    explicit = getattr(settings, "AUTH_COOKIE_SECURE", None)
    if explicit is True or explicit is False:
        return bool(explicit)
    try:
        return bool(request.is_secure())
    except Exception:
        return False


def _cookie_domain():
    return getattr(settings, "AUTH_COOKIE_DOMAIN", None) or None


def _set_auth_cookies(request, response: JsonResponse, *, access: str, refresh: str | None):
    access_name = getattr(settings, "AUTH_COOKIE_ACCESS_NAME", "access_token")
    refresh_name = getattr(settings, "AUTH_COOKIE_REFRESH_NAME", "refresh_token")

    response.set_cookie(
        access_name,
        access,
        httponly=True,
        secure=_cookie_secure(request),
        samesite=_cookie_samesite(),
        domain=_cookie_domain(),
        path="/",
    )
    if refresh is not None:
        response.set_cookie(
            refresh_name,
            refresh,
            httponly=True,
            secure=_cookie_secure(request),
            samesite=_cookie_samesite(),
            domain=_cookie_domain(),
            path="/",
        )


def _clear_auth_cookies(response: JsonResponse):
    access_name = getattr(settings, "AUTH_COOKIE_ACCESS_NAME", "access_token")
    refresh_name = getattr(settings, "AUTH_COOKIE_REFRESH_NAME", "refresh_token")

    response.delete_cookie(access_name, path="/", domain=_cookie_domain())
    response.delete_cookie(refresh_name, path="/", domain=_cookie_domain())


def _signed_in(request, user) -> JsonResponse:
    resp = JsonResponse({"status": "ok"})
    _set_auth_cookies(
        request,
        resp,
        access=issue_access_token(user_id=user.id),
        refresh=issue_refresh_token(user_id=user.id),
    )
    return resp


def _me_payload(user) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name or "",
        "is_admin": bool(user.is_admin),
        "ui_language": user.get_preferred_language(),
    }


@router.post("/register", response=StatusOut)
def register(request, payload: RegisterIn):
    email = (payload.email or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationFailed(general=["A valid email is required."])
    if len(payload.password or "") < PASSWORD_MIN_LENGTH:
        raise ValidationFailed(general=[f"Password must be at least {PASSWORD_MIN_LENGTH} characters."])

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=payload.password,
                full_name=(payload.full_name or "").strip(),
            )
    except IntegrityError:
        raise HttpError(400, "User with this email already exists")

    return _signed_in(request, user)


@router.post("/login", response=StatusOut)
def login(request, payload: LoginIn):
    user = authenticate(request, username=(payload.email or "").strip().lower(), password=payload.password)
    if user is None:
        raise HttpError(401, "Invalid credentials")
    return _signed_in(request, user)


@router.post("/refresh", response=StatusOut)
def refresh(request, payload: RefreshIn | None = None):
    refresh_token = ((payload.refresh if payload else None) or "").strip()
    if not refresh_token:
        refresh_name = getattr(settings, "AUTH_COOKIE_REFRESH_NAME", "refresh_token")
        refresh_token = (request.COOKIES.get(refresh_name) or "").strip()

    if not refresh_token:
        raise HttpError(401, "Invalid refresh token")

    try:
        data = decode_token(refresh_token)
    except Exception:
        raise HttpError(401, "Invalid refresh token")

    if data.get("type") != "refresh":
        raise HttpError(401, "Invalid refresh token")

    user = User.objects.filter(id=int(data.get("sub") or 0), is_active=True).first()
    if user is None:
        raise HttpError(401, "Invalid refresh token")

    resp = JsonResponse({"status": "ok"})
    _set_auth_cookies(request, resp, access=issue_access_token(user_id=user.id), refresh=None)
    return resp


@router.post("/logout", response=StatusOut)
def logout(request):
    resp = JsonResponse({"status": "ok"})
    _clear_auth_cookies(resp)
    return resp


@router.get("/me", response=MeOut, auth=auth)
def me(request):
    return _me_payload(request.auth)


@router.patch("/me", response=MeOut, auth=auth)
def update_me(request, payload: MeUpdateIn):
    user = request.auth
    if payload.full_name is not None:
        user.full_name = (payload.full_name or "").strip()
        user.save(update_fields=["full_name", "updated_at"])
    return _me_payload(user)


@router.get("/me/language", response=LanguagePreferenceOut, auth=auth)
def get_language(request):
    return {"language": request.auth.get_preferred_language()}


@router.put("/me/language", response=LanguagePreferenceOut, auth=auth)
def set_language(request, payload: LanguagePreferenceIn):
    code = normalize_language_code(payload.language)
    if code not in get_supported_language_codes():
        raise ValidationFailed(fields={code or "language": {"language": "Unsupported language."}})
    request.auth.set_preferred_language(code)
    return {"language": code}


@admin_router.get("", response=UserListOut)
def list_users(request, page: int = 1, limit: int = 10, search: str = "", role: str = "all"):
    return services.list_users(page=page, limit=limit, search=search, role=role)


@admin_router.put("/{user_id}/role", response=UserOut)
def update_user_role(request, user_id: int, payload: UserRoleIn):
    user = services.update_user_role(request.auth, user_id, payload.is_admin)
    return services.serialize_user(user)


@admin_router.put("/{user_id}/status", response=UserOut)
def update_user_status(request, user_id: int, payload: UserStatusIn):
    user = services.update_user_status(request.auth, user_id, payload.disabled)
    return services.serialize_user(user)


@admin_router.delete("/{user_id}", response=StatusOut)
def delete_user(request, user_id: int):
    services.delete_user(request.auth, user_id)
    return {"status": "ok"}
