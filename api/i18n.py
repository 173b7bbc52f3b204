from __future__ import annotations

from django.conf import settings
from django.utils import translation


def normalize_language_code(language_code: str | None) -> str:
    if not language_code:
        return ""
    return (language_code or "").replace("_", "-").split("-")[0].strip().lower()


def get_supported_language_codes() -> list[str]:
    raw = getattr(settings, "SUPPORTED_LANGUAGE_CODES", None)
    if raw is None:
        langs = getattr(settings, "LANGUAGES", [])
        raw = [c for c, _name in langs]

    out: list[str] = []
    for c in (raw or []):
        c = normalize_language_code(c)
        if not c or c in out:
            continue
        out.append(c)

    if not out:
        default = normalize_language_code(getattr(settings, "LANGUAGE_CODE", ""))
        if default:
            out = [default]

    return out


def get_default_language_code() -> str:
    default = normalize_language_code(getattr(settings, "LANGUAGE_CODE", ""))
    supported = get_supported_language_codes()
    if supported and default not in supported:
        default = supported[0]
    return default or (supported[0] if supported else "en")


def get_request_language_code(
    request,
    *,
    query_param: str | None = None,
) -> str:
    """Locale for content resolution.

    Order: explicit query parameter, the signed-in user's saved preference,
    Accept-Language, then the site default.
    """
    supported = get_supported_language_codes()
    query_param = query_param or getattr(settings, "LANGUAGE_QUERY_PARAM", "lang")

    if query_param:
        try:
            qp = normalize_language_code(getattr(request, "GET", {}).get(query_param))
        except Exception:
            qp = ""
        if qp and qp in supported:
            return qp

    user = getattr(request, "auth", None) or getattr(request, "user", None)
    prefs = getattr(user, "preferences", None)
    if isinstance(prefs, dict):
        pref = normalize_language_code(prefs.get("ui_language"))
        if pref and pref in supported:
            return pref

    try:
        hdr = normalize_language_code(translation.get_language_from_request(request, check_path=False))
    except Exception:
        hdr = ""
    if hdr and hdr in supported:
        return hdr

    return get_default_language_code()
