"""
Slug-backed lookup, rename and create operations.

These sit above SlugResolver and EstablishmentStore. Store failures are
logged and re-raised as-is; nothing here retries or swallows them.
"""

from typing import Any, Hashable, Optional

from .database import Establishment
from .logger import get_logger
from .resolver import SlugResolver
from .schema import validate_establishment
from .storage import EstablishmentStore


def find_by_slug(store: EstablishmentStore, slug: Any) -> Optional[Establishment]:
    """
    Return the establishment holding slug, or None.

    Suffixed slugs such as "salao-2" are valid lookups, so the slug is not
    run through is_valid_slug; only empty or non-string input is refused.
    """
    if not isinstance(slug, str) or not slug.strip():
        return None
    return store.fetch_by_slug(slug)


def rename(
    store: EstablishmentStore,
    resolver: SlugResolver,
    key: Hashable,
    new_name: str,
) -> str:
    """
    Derive a fresh slug from new_name and persist it on establishment key.

    The establishment's own current slug does not count as a collision.
    If resolution fails nothing is written; if the update fails the store
    has rolled back and the computed slug is dropped. Both count toward
    rename_failures.

    Returns:
        The slug now stored on the establishment
    """
    logger = get_logger()
    slug = None
    try:
        slug = resolver.resolve(new_name, exclude_key=key)
        store.update_slug(key, slug)
    except Exception as e:
        logger.record_rename_failure(type(e).__name__)
        logger.error("Rename failed", establishment_id=key, slug=slug, error=str(e))
        raise

    logger.record_rename()
    logger.info(f"Slug updated: {slug}", establishment_id=key)
    return slug


def create_establishment(
    store: EstablishmentStore,
    resolver: SlugResolver,
    name: str,
) -> Establishment:
    """
    Create an establishment with a unique slug derived from its name.

    Raises:
        ValueError: If the payload fails validate_establishment
        sqlalchemy.exc.IntegrityError: If another writer claimed the slug
            between resolution and insert
    """
    errors = validate_establishment({"name": name})
    if errors:
        raise ValueError("; ".join(errors))

    logger = get_logger()
    slug = None
    try:
        slug = resolver.resolve(name)
        establishment = store.create(name.strip(), slug)
    except Exception as e:
        logger.record_error(type(e).__name__)
        logger.error("Establishment create failed", slug=slug, error=str(e))
        raise

    logger.info(f"Establishment created: {slug}", establishment_id=establishment.id)
    return establishment


def share_link(base_url: Optional[str], slug: Optional[str]) -> Optional[str]:
    """Public booking link for an establishment, or None without a slug."""
    if not slug:
        return None
    base = (base_url or "").rstrip("/")
    return f"{base}/{slug}"
