"""In-memory translation bundles and the locale-aware lookup built on them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
import re
from typing import Any

from webbase.core.errors import InvalidLocaleError
from webbase.core.errors import TranslationLoadError

_LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}(-[a-z0-9]{2,8})*$")


def normalize_locale(tag: str) -> str:
    """Return the canonical form of a locale tag (``en_US`` -> ``en-us``)."""
    if not isinstance(tag, str):
        raise InvalidLocaleError(f"Locale must be a string, got {type(tag).__name__}")
    normalized = tag.strip().replace("_", "-").lower()
    if not _LOCALE_PATTERN.match(normalized):
        raise InvalidLocaleError(f"Invalid locale tag {tag!r}")
    return normalized


@dataclass(frozen=True)
class Translation:
    """One translated message."""

    id: str
    text: str

    @classmethod
    def from_record(cls, record: Any) -> Translation:
        """Build a translation from a decoded ``{"id": ..., "translation": ...}`` record.

        A plural-style translation object contributes its ``other`` form only.
        """
        if not isinstance(record, Mapping):
            raise TranslationLoadError(f"Translation record must be an object, got {type(record).__name__}")

        translation_id = record.get("id")
        if not isinstance(translation_id, str) or not translation_id:
            raise TranslationLoadError("Translation record is missing a string `id`")

        text = record.get("translation")
        if isinstance(text, Mapping):
            text = text.get("other")
        if not isinstance(text, str):
            raise TranslationLoadError(f"Translation record {translation_id!r} has no string `translation`")

        return cls(id=translation_id, text=text)


@dataclass
class TranslationBundle:
    """All translations registered for one locale."""

    locale: str
    entries: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Translator:
    """Resolve message keys for a requested locale, falling back to a default locale.

    When neither locale knows the key, the key itself is returned.
    """

    store: BundleStore
    locale: str
    default_locale: str

    def __call__(self, key: str, **kwargs: Any) -> str:
        text = self.store.lookup(self.locale, key)
        if text is None:
            text = self.store.lookup(self.default_locale, key)
        if text is None:
            text = key
        if not kwargs:
            return text
        try:
            return text.format_map(kwargs)
        except (AttributeError, KeyError, IndexError, ValueError):
            return text


class BundleStore:
    """Per-locale translation bundles.

    Populated during startup and read-only afterwards; there is no locking.
    """

    def __init__(self) -> None:
        self._bundles: dict[str, TranslationBundle] = {}

    def add(self, locale: str, translation: Translation) -> None:
        key = normalize_locale(locale)
        bundle = self._bundles.setdefault(key, TranslationBundle(locale=key))
        bundle.entries[translation.id] = translation.text

    def bundle(self, locale: str) -> TranslationBundle | None:
        return self._bundles.get(normalize_locale(locale))

    def locales(self) -> list[str]:
        return sorted(self._bundles)

    def lookup(self, locale: str, key: str) -> str | None:
        bundle = self._bundles.get(normalize_locale(locale))
        if bundle is None:
            return None
        return bundle.entries.get(key)

    def translator(self, locale: str, default_locale: str) -> Translator:
        """Bind a lookup function to ``locale`` with ``default_locale`` as fallback."""
        return Translator(store=self, locale=normalize_locale(locale), default_locale=normalize_locale(default_locale))

    def __len__(self) -> int:
        return sum(len(bundle.entries) for bundle in self._bundles.values())


_default_store = BundleStore()


def default_store() -> BundleStore:
    """Return the process-wide store used when callers do not pass their own."""
    return _default_store
