"""Locale resolution and translation lookup over the JSON catalogs in ``locales/``."""
import json
import logging
import re
from functools import lru_cache
from pathlib import Path

from sqlalchemy.orm import Session

from .models import User

logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).resolve().parent / "locales"
DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = ("en", "es-ES")
LOCALE_COOKIE = "NEXT_LOCALE"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def normalize_locale(value: str | None) -> str | None:
    """Map a tag such as ``es``, ``ES-es`` or ``en-US`` to a supported locale, or None."""
    if not value:
        return None
    tag = value.strip().lower()
    for loc in SUPPORTED_LOCALES:
        if tag == loc.lower():
            return loc
    base = tag.split("-")[0]
    for loc in SUPPORTED_LOCALES:
        if loc.lower().split("-")[0] == base:
            return loc
    return None


@lru_cache(maxsize=len(SUPPORTED_LOCALES))
def _load_catalog(locale: str) -> dict:
    path = LOCALES_DIR / f"{locale}.json"
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def load_messages(locale: str | None) -> dict:
    # at most one cached catalog per supported locale
    return _load_catalog(normalize_locale(locale) or DEFAULT_LOCALE)


def interpolate(template: str, values: dict | None = None) -> str:
    """Replace ``{name}`` placeholders. Unknown placeholders are left as they are."""
    if not values:
        return template

    def repl(match):
        key = match.group(1)
        return str(values[key]) if key in values else match.group(0)

    return _PLACEHOLDER.sub(repl, template)


def _lookup(messages: dict, key: str):
    node = messages
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


def get_translations_for_locale(locale: str, namespace: str | None = None):
    """Return ``t(key, values=None)`` for one locale, optionally scoped to a namespace.

    Missing keys come back as the key itself.
    """
    messages = load_messages(locale)
    if namespace:
        scoped = messages
        for part in namespace.split("."):
            scoped = scoped.get(part, {}) if isinstance(scoped, dict) else {}
        messages = scoped

    def t(key: str, values: dict | None = None) -> str:
        text = _lookup(messages, key)
        if text is None:
            logger.debug("Missing translation %r (locale=%s, namespace=%s)", key, locale, namespace)
            return key
        return interpolate(text, values)

    return t


def parse_accept_language(header: str | None) -> list[str]:
    """Language tags from an Accept-Language header, highest quality first."""
    if not header:
        return []
    weighted = []
    for i, item in enumerate(header.split(",")):
        parts = item.strip().split(";")
        tag = parts[0].strip()
        if not tag or tag == "*":
            continue
        q = 1.0
        for param in parts[1:]:
            name, _, val = param.strip().partition("=")
            if name == "q":
                try:
                    q = float(val)
                except ValueError:
                    q = 0.0
        weighted.append((-q, i, tag))
    return [tag for _, _, tag in sorted(weighted)]


def get_user_locale(db: Session | None, user_id: str | None = None,
                    cookie_locale: str | None = None,
                    accept_language: str | None = None) -> str:
    """Stored user preference, then the locale cookie, then Accept-Language, then English."""
    if db is not None and user_id:
        user = db.get(User, user_id)
        stored = normalize_locale(user.language) if user else None
        if stored:
            return stored
    from_cookie = normalize_locale(cookie_locale)
    if from_cookie:
        return from_cookie
    for tag in parse_accept_language(accept_language):
        loc = normalize_locale(tag)
        if loc:
            return loc
    return DEFAULT_LOCALE


def get_email_translations(db: Session | None, user_id: str | None = None,
                           namespace: str = "emails"):
    """Translations for emails sent to ``user_id``; English when there is no user."""
    locale = get_user_locale(db, user_id) if user_id else DEFAULT_LOCALE
    return get_translations_for_locale(locale, namespace)
