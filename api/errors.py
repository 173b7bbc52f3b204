from __future__ import annotations

from typing import Any


class GlossaryError(Exception):
    """Base for errors the caller can act on.

    Raised by the service layer and turned into a structured JSON response by
    the API exception handler, so each subclass carries its own machine code
    and HTTP status.
    """

    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self) -> dict[str, Any]:
        return {
            "status": "error",
            "code": self.code,
            "message": self.message,
            "fields": {},
            "general": [],
        }


class NotFound(GlossaryError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class IllegalTransition(GlossaryError):
    code = "illegal_transition"
    status_code = 409
    default_message = "Operation is not allowed in the current state"


class EditorialConflict(GlossaryError):
    code = "editorial_conflict"
    status_code = 409
    default_message = "The term already has an open draft"


class AuthorizationDenied(GlossaryError):
    code = "authorization_denied"
    status_code = 403
    default_message = "Admin privileges required"


class ValidationFailed(GlossaryError):
    """Field errors keyed by language code, e.g. ``{"lv": {"name": "..."}}``."""

    code = "validation_failed"
    status_code = 400
    default_message = "Validation failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        fields: dict[str, dict[str, str]] | None = None,
        general: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.fields = fields or {}
        self.general = list(general or [])

    def as_payload(self) -> dict[str, Any]:
        payload = super().as_payload()
        payload["fields"] = self.fields
        payload["general"] = self.general
        return payload


class FieldErrors:
    """Collects per-language field errors before raising ``ValidationFailed``."""

    def __init__(self) -> None:
        self.fields: dict[str, dict[str, str]] = {}
        self.general: list[str] = []

    def add(self, language_code: str, field: str, message: str) -> None:
        self.fields.setdefault(language_code, {})[field] = message

    def add_general(self, message: str) -> None:
        self.general.append(message)

    def __bool__(self) -> bool:
        return bool(self.fields or self.general)

    def raise_if_any(self, message: str = "Validation failed") -> None:
        if self:
            raise ValidationFailed(message, fields=self.fields, general=self.general)
