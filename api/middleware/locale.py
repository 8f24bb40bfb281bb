from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import settings
from core.i18n import available_locales, normalize_locale, set_locale


def _pick_from_accept_language(al: str) -> str:
    """Parse Accept-Language with q weights, return best lang tag.

    Examples:
      'pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7' -> 'pt-BR'
    """
    items = []
    for part in al.split(','):
        p = part.strip()
        if not p:
            continue
        seg = p.split(';', 1)
        lang = seg[0].strip()
        q = 1.0
        if len(seg) == 2 and seg[1].strip().startswith('q='):
            try:
                q = float(seg[1].strip()[2:])
            except ValueError:
                q = 1.0
        items.append((lang, q))
    if not items:
        return settings.DEFAULT_LOCALE
    # sort by q desc, keep order for ties
    items.sort(key=lambda x: x[1], reverse=True)
    return items[0][0]


def _normalize(lang: str) -> str:
    """Map common browser tags to our locales."""
    tag = (lang or settings.DEFAULT_LOCALE).replace('_', '-').lower()
    if tag in {'zh-cn', 'zh-hans', 'zh'}:
        return 'zh_Hans'
    if tag in {'pt', 'pt-br'}:
        return 'pt_BR'
    if tag in {'en', 'en-us', 'en-gb'}:
        return 'en'
    locale = normalize_locale(lang)
    return locale if locale in available_locales() else settings.DEFAULT_LOCALE


class LocaleMiddleware(BaseHTTPMiddleware):
    """Parse locale from query/header and set into context.

    Priority: ?lang=xx > X-Lang > Accept-Language > DEFAULT_LOCALE.
    """

    async def dispatch(self, request: Request, call_next):
        lang = request.query_params.get("lang") or request.headers.get("X-Lang")
        if not lang:
            al = request.headers.get("Accept-Language", "")
            lang = _pick_from_accept_language(al) if al else settings.DEFAULT_LOCALE
        locale = _normalize(lang)
        set_locale(locale)
        request.state.locale = locale
        response = await call_next(request)
        response.headers["Content-Language"] = locale.replace("_", "-")
        return response
