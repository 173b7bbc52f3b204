from __future__ import annotations

from ninja import Router

from api.i18n import get_request_language_code

from . import services
from .schemas import CategoryOut, LabelRefOut, LanguageOut, TermDetailOut, TermPageOut

router = Router(tags=["glossary"])


@router.get("/terms", response=TermPageOut)
def search_terms(request, q: str = "", skip: int = 0):
    return services.search_terms(q, skip, locale=get_request_language_code(request))


@router.get("/terms/recent", response=TermPageOut)
def recent_terms(request, skip: int = 0):
    return services.recent_terms(skip, locale=get_request_language_code(request))


@router.get("/terms/{term_id}", response=TermDetailOut)
def term_detail(request, term_id: int):
    return services.term_detail(term_id, locale=get_request_language_code(request))


@router.get("/categories", response=list[CategoryOut])
def categories(request):
    return services.list_categories(get_request_language_code(request))


@router.get("/categories/{name}/terms", response=TermPageOut)
def terms_by_category(request, name: str, skip: int = 0):
    return services.terms_by_category(name, skip, locale=get_request_language_code(request))


@router.get("/languages", response=list[LanguageOut])
def languages(request):
    return services.list_languages()


@router.get("/labels", response=list[LabelRefOut])
def labels(request):
    return services.labels_for_select(get_request_language_code(request))
