"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_LOCALE = "en-US"
DEFAULT_RESOURCE_DIR_NAME = "i18n"
DEFAULT_RESOURCE_EXTENSION = ".json"


def _get_optional_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _get_extension_env(name: str, default: str) -> str:
    raw = _get_optional_env(name)
    if raw is None:
        return default
    return raw if raw.startswith(".") else f".{raw}"


@dataclass(frozen=True)
class I18nSettings:
    """Runtime settings for translation resource discovery."""

    search_root: str | None = None
    resource_dir_name: str = DEFAULT_RESOURCE_DIR_NAME
    resource_extension: str = DEFAULT_RESOURCE_EXTENSION
    default_locale: str = DEFAULT_LOCALE
    locale: str = DEFAULT_LOCALE

    def safe_for_logging(self) -> dict[str, str | None]:
        """Return i18n settings safe for logs."""
        return {
            "search_root": self.search_root,
            "resource_dir_name": self.resource_dir_name,
            "resource_extension": self.resource_extension,
            "default_locale": self.default_locale,
            "locale": self.locale,
        }


@lru_cache(maxsize=1)
def get_i18n_settings() -> I18nSettings:
    """Load i18n settings from the environment."""
    default_locale = os.getenv("WEBBASE_DEFAULT_LOCALE", DEFAULT_LOCALE)
    return I18nSettings(
        search_root=_get_optional_env("WEBBASE_I18N_SEARCH_ROOT"),
        resource_dir_name=os.getenv("WEBBASE_I18N_DIR_NAME", DEFAULT_RESOURCE_DIR_NAME),
        resource_extension=_get_extension_env("WEBBASE_I18N_EXTENSION", DEFAULT_RESOURCE_EXTENSION),
        default_locale=default_locale,
        locale=os.getenv("WEBBASE_LOCALE", default_locale),
    )
