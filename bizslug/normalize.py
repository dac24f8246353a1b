import re
import time
import unicodedata
from typing import Any, Callable

FALLBACK_SLUG = "estabelecimento"
MIN_SLUG_LENGTH = 3
MAX_SLUG_LENGTH = 100

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_SEPARATORS = re.compile(r"[\s_]+")
_NOT_SLUG_CHAR = re.compile(r"[^a-z0-9]")


def now_millis() -> int:
    return int(time.time() * 1000)


def strip_accents(text: str) -> str:
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", text))


def normalize_slug(raw_name: Any, clock: Callable[[], int] = now_millis) -> str:
    """
    Map a display name to its base slug.

    "Salão & Spa" -> "salaospa". Empty or non-string input falls back to
    FALLBACK_SLUG. Results shorter than MIN_SLUG_LENGTH get a "-NNNN"
    clock suffix, which is_valid_slug does not accept.
    """
    if not isinstance(raw_name, str) or not raw_name.strip():
        return FALLBACK_SLUG

    slug = strip_accents(raw_name.strip().lower())
    slug = _SEPARATORS.sub("", slug)
    slug = _NOT_SLUG_CHAR.sub("", slug)
    slug = slug[:MAX_SLUG_LENGTH]

    if not slug:
        slug = FALLBACK_SLUG

    if len(slug) < MIN_SLUG_LENGTH:
        slug = f"{slug}-{str(clock())[-4:]}"

    return slug
