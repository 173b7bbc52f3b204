from __future__ import annotations

from .settings_base import *  # noqa: F403

# Development defaults
DEBUG = env.bool("DEBUG", default=True)  # type: ignore[name-defined]  # noqa: F405
NINJA_ENABLE_DOCS = env.bool("NINJA_ENABLE_DOCS", default=True)  # type: ignore[name-defined]  # noqa: F405

# Local sqlite unless DATABASE_URL is set explicitly
DATABASES = {  # noqa: F405
    "default": env.db(  # type: ignore[name-defined]  # noqa: F405
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",  # type: ignore[name-defined]  # noqa: F405
    )
}
