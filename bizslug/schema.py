from typing import Any, Dict, List

from .normalize import MAX_SLUG_LENGTH, MIN_SLUG_LENGTH

REQUIRED_STR_FIELDS = ["name"]
OPTIONAL_STR_FIELDS = ["slug"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_slug_char(c: str) -> bool:
    return ("a" <= c <= "z") or ("0" <= c <= "9")


def validate_slug(slug: Any) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    A valid slug is 3-100 characters of lower-case ASCII letters and digits.
    """
    if not isinstance(slug, str) or slug == "":
        return ["Slug must be a non-empty string"]

    errors: List[str] = []
    if not MIN_SLUG_LENGTH <= len(slug) <= MAX_SLUG_LENGTH:
        errors.append(
            f"Slug length must be between {MIN_SLUG_LENGTH} and {MAX_SLUG_LENGTH} (got {len(slug)})"
        )

    bad = sorted({c for c in slug if not _is_slug_char(c)})
    if bad:
        errors.append(f"Slug contains invalid characters: {''.join(bad)!r}")

    return errors


def is_valid_slug(slug: Any) -> bool:
    return not validate_slug(slug)


def validate_establishment(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for an establishment payload.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    return errors
