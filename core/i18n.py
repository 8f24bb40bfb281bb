from __future__ import annotations

import gettext
from contextvars import ContextVar
from pathlib import Path

import polib
import structlog

DEFAULT_LOCALE = "en"
LOCALE_DIR = Path(__file__).resolve().parent.parent / "locales"

_current_locale: ContextVar[str] = ContextVar("current_locale", default=DEFAULT_LOCALE)
_translators: dict[str, gettext.NullTranslations] = {}
_logger = structlog.get_logger(__name__)


class PoTranslations(gettext.NullTranslations):
    """Translations read straight from a .po catalog (no compiled .mo needed)."""

    def __init__(self, catalog: dict[str, str]) -> None:
        super().__init__()
        self._catalog = catalog

    @classmethod
    def from_file(cls, path: Path) -> "PoTranslations":
        po = polib.pofile(str(path))
        return cls({entry.msgid: entry.msgstr for entry in po.translated_entries()})

    def gettext(self, message: str) -> str:
        text = self._catalog.get(message)
        if text:
            return text
        if self._fallback:
            return self._fallback.gettext(message)
        return message


def normalize_locale(locale: str | None) -> str:
    """'pt-br' -> 'pt_BR', 'EN' -> 'en'."""
    tag = (locale or DEFAULT_LOCALE).strip().replace("-", "_")
    lang, _, region = tag.partition("_")
    if not region:
        return lang.lower()
    if len(region) == 2:
        return f"{lang.lower()}_{region.upper()}"
    return f"{lang.lower()}_{region.capitalize()}"


def set_locale(locale: str) -> None:
    """Set current request locale (fallback to 'en')."""
    _current_locale.set(normalize_locale(locale) if locale else DEFAULT_LOCALE)


def get_locale() -> str:
    """Get current request locale (default 'en')."""
    return _current_locale.get()


def available_locales() -> list[str]:
    return sorted(p.parent.parent.name for p in LOCALE_DIR.glob("*/LC_MESSAGES/messages.po"))


def _load(locale: str) -> gettext.NullTranslations:
    po_path = LOCALE_DIR / locale / "LC_MESSAGES" / "messages.po"
    if po_path.exists():
        try:
            return PoTranslations.from_file(po_path)
        except (OSError, ValueError) as exc:
            _logger.warning("i18n_catalog_invalid", locale=locale, path=str(po_path), error=str(exc))
    return gettext.translation(
        domain="messages",
        localedir=str(LOCALE_DIR),
        languages=[locale],
        fallback=True,
    )


def _get_translator(locale: str) -> gettext.NullTranslations:
    tr = _translators.get(locale)
    if tr is not None:
        return tr
    tr = _load(locale)
    if locale != DEFAULT_LOCALE:
        # pt_BR -> pt -> en
        lang = locale.split("_", 1)[0]
        if lang != locale:
            tr.add_fallback(_get_translator(lang))
        else:
            tr.add_fallback(_get_translator(DEFAULT_LOCALE))
    _translators[locale] = tr
    return tr


def t(msgid: str, **params) -> str:
    """Translate msgid using current locale and format with params.

    If translation file is missing or key not found, returns msgid itself.
    """
    text = _get_translator(get_locale()).gettext(msgid)
    if not params:
        return text
    try:
        return text.format(**params)
    except (KeyError, IndexError, ValueError) as exc:
        _logger.warning("i18n_format_failed", msgid=msgid, params=list(params.keys()), error=str(exc))
        return text
