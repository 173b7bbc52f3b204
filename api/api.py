from __future__ import annotations

import logging

from django.conf import settings
from ninja import NinjaAPI

from accounts.api import admin_router as admin_users_router
from accounts.api import router as auth_router
from community.api import admin_router as admin_community_router
from community.api import router as community_router
from glossary.admin_api import router as admin_glossary_router
from glossary.api import router as glossary_router

from .errors import GlossaryError

logger = logging.getLogger(__name__)

docs_url = "/docs" if getattr(settings, "NINJA_ENABLE_DOCS", True) else None
openapi_url = "/openapi.json" if getattr(settings, "NINJA_ENABLE_DOCS", True) else None

api = NinjaAPI(
    title="Dental glossary API",
    version="1",
    docs_url=docs_url,
    openapi_url=openapi_url,
)

api.add_router("/auth", auth_router)
api.add_router("/glossary", glossary_router)
api.add_router("/community", community_router)
api.add_router("/admin/glossary", admin_glossary_router)
api.add_router("/admin/community", admin_community_router)
api.add_router("/admin/users", admin_users_router)


@api.exception_handler(GlossaryError)
def glossary_error(request, exc: GlossaryError):
    if exc.status_code >= 409:
        logger.warning("%s: %s", exc.code, exc.message, extra={"path": request.path})
    return api.create_response(request, exc.as_payload(), status=exc.status_code)


@api.get("/health")
def health(request):
    return {"status": "ok"}
