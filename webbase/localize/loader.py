"""Discover and load translation documents.

Translation files live in folders named ``i18n`` anywhere below the working
directory or the optional secondary search root. Only the files directly
inside such a folder are loaded; the locale of each file is the part of its
name before the first dot (``en-US.all.json`` holds ``en-US`` messages).

Each document is a JSON array of records::

    [{"id": "hello", "translation": "Hello"}]
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from webbase.core.config import I18nSettings
from webbase.core.config import get_i18n_settings
from webbase.core.errors import TranslationLoadError
from webbase.localize.store import BundleStore
from webbase.localize.store import Translation
from webbase.localize.store import Translator
from webbase.localize.store import default_store
from webbase.localize.store import normalize_locale

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_PATH = Path(__file__).resolve().parent / "data" / "en-US.json"


def _add_document(locale: str, document: str | bytes, store: BundleStore, *, path: str | None = None) -> int:
    try:
        records = json.loads(document)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TranslationLoadError(f"Invalid translation document: {exc}", path=path) from exc

    if not isinstance(records, list):
        raise TranslationLoadError("Translation document must be a JSON array", path=path)

    for record in records:
        try:
            translation = Translation.from_record(record)
        except TranslationLoadError as exc:
            raise TranslationLoadError(str(exc), path=path) from exc
        store.add(locale, translation)
    return len(records)


def load_json(locale: str, document: str | bytes, store: BundleStore | None = None) -> Translator:
    """Load an inline translation document for ``locale``.

    Records registered before a failing record stay registered. The returned
    lookup has no separate fallback locale.
    """
    store = default_store() if store is None else store
    normalize_locale(locale)
    try:
        _add_document(locale, document, store)
    except TranslationLoadError:
        logger.error("Failed to load inline translations for %s", locale)
        raise
    return store.translator(locale, locale)


def locale_from_filename(path: Path) -> str:
    return normalize_locale(path.name.split(".", 1)[0])


def load_translation_file(path: Path, store: BundleStore) -> int:
    """Load one translation file into ``store`` and return its record count."""
    try:
        locale = locale_from_filename(path)
    except TranslationLoadError as exc:
        raise TranslationLoadError(str(exc), path=str(path)) from exc

    try:
        document = path.read_bytes()
    except OSError as exc:
        raise TranslationLoadError(f"Cannot read translation file: {exc}", path=str(path)) from exc

    logger.info("Loading %s", path)
    return _add_document(locale, document, store, path=str(path))


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]] | None:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning("Cannot read directory %s: %s", directory, exc)
        return None


def load_translation_files(directory: Path, store: BundleStore, settings: I18nSettings) -> int:
    """Load every resource file directly inside a resource folder."""
    entries = _sorted_entries(directory)
    if entries is None:
        return 0

    loaded = 0
    for entry in entries:
        if not entry.is_file() or Path(entry.name).suffix != settings.resource_extension:
            continue
        load_translation_file(Path(entry.path), store)
        loaded += 1
    return loaded


def search_directory(directory: Path, pwd: Path, store: BundleStore, settings: I18nSettings) -> int:
    """Walk ``directory`` looking for resource folders and load them.

    Unreadable directories are logged and skipped. The working directory is
    never entered from another root, so a root containing it does not load
    its resource folders twice.
    """
    entries = _sorted_entries(directory)
    if entries is None:
        return 0

    loaded = 0
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False):
            continue

        full_path = directory / entry.name
        if full_path == pwd:
            continue

        if entry.name == settings.resource_dir_name:
            loaded += load_translation_files(full_path, store, settings)
            continue

        loaded += search_directory(full_path, pwd, store, settings)
    return loaded


def search_roots(pwd: Path, settings: I18nSettings) -> list[Path]:
    roots = [pwd]
    if settings.search_root:
        secondary = Path(os.path.realpath(settings.search_root))
        if secondary != pwd:
            roots.append(secondary)
    return roots


def load_files(
    locale: str,
    default_locale: str,
    store: BundleStore | None = None,
    settings: I18nSettings | None = None,
) -> Translator:
    """Load translation files below the working directory and the secondary root.

    Returns the lookup bound to ``locale`` with ``default_locale`` as fallback.
    A file that cannot be parsed aborts the load.
    """
    store = default_store() if store is None else store
    settings = get_i18n_settings() if settings is None else settings
    pwd = Path(os.path.realpath(os.getcwd()))

    logger.info("Searching translations PWD[%s] SEARCH_ROOT[%s]", pwd, settings.search_root or "")

    loaded = 0
    for root in search_roots(pwd, settings):
        loaded += search_directory(root, pwd, store, settings)

    logger.info("Loaded %d translation file(s) covering %s", loaded, ", ".join(store.locales()) or "no locales")
    return store.translator(locale, default_locale)


def init_locale(user_locale: str, store: BundleStore | None = None) -> Translator:
    """Load the packaged default messages under ``user_locale``."""
    return load_json(user_locale, DEFAULT_DOCUMENT_PATH.read_bytes(), store)
