from __future__ import annotations

from django.conf import settings
from django.contrib.auth import get_user_model
from ninja.security import HttpBearer

from api.errors import AuthorizationDenied

from .jwt_utils import decode_token

User = get_user_model()


class JWTAuth(HttpBearer):
    def __call__(self, request):
        # Access token lives in an HttpOnly cookie; a bearer header is accepted too.
        try:
            cookie_name = getattr(settings, "AUTH_COOKIE_ACCESS_NAME", "access_token")
            token = (request.COOKIES.get(cookie_name) or "").strip()
        except Exception:
            token = ""

        if not token:
            return super().__call__(request)

        return self.authenticate(request, token)

    def authenticate(self, request, token: str):
        try:
            payload = decode_token(token)
        except Exception:
            return None

        if payload.get("type") != "access":
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        try:
            return User.objects.get(id=int(user_id), is_active=True)
        except (User.DoesNotExist, ValueError):
            return None


def require_admin(user) -> None:
    if user is None or not getattr(user, "is_active", False) or not getattr(user, "is_admin", False):
        raise AuthorizationDenied()


class AdminAuth(JWTAuth):
    """Authorization gate for every back-office route.

    Anyone who is not a signed-in, active admin (anonymous, expired token,
    disabled account, regular user) is refused with ``AuthorizationDenied``
    before any handler touches the store.
    """

    def __call__(self, request):
        user = super().__call__(request)
        require_admin(user)
        return user
