"""
Establishment store.

SQLAlchemy-backed implementation of the collaborator the resolver and the
service helpers consume.

Responsibilities:
- Exact, case-sensitive slug lookups with optional self-exclusion.
- Transaction-safe writes (rollback before re-raising).

Non-Responsibilities:
- No slug derivation or validation.
- No retries.
"""

from typing import Hashable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import Establishment


class EstablishmentNotFound(LookupError):
    """Raised when a write targets an establishment id that does not exist."""


class EstablishmentStore:
    """Read and write establishments through a SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def exists(self, candidate: str, exclude_key: Optional[Hashable] = None) -> bool:
        query = self.session.query(Establishment.id).filter(Establishment.slug == candidate)
        if exclude_key is not None:
            query = query.filter(Establishment.id != exclude_key)
        return query.first() is not None

    def fetch_by_key(self, key: Hashable) -> Optional[Establishment]:
        return self.session.get(Establishment, key)

    def fetch_by_slug(self, slug: str) -> Optional[Establishment]:
        return self.session.query(Establishment).filter(Establishment.slug == slug).first()

    def list_all(self) -> List[Establishment]:
        return self.session.query(Establishment).order_by(Establishment.name).all()

    def create(self, name: str, slug: Optional[str]) -> Establishment:
        """
        Insert a new establishment and commit.

        Raises:
            sqlalchemy.exc.IntegrityError: If the slug is already taken
        """
        establishment = Establishment(name=name, slug=slug)
        self.session.add(establishment)
        self._commit()
        return establishment

    def update_slug(self, key: Hashable, slug: str) -> Establishment:
        """
        Set the slug of an existing establishment and commit.

        Raises:
            EstablishmentNotFound: If no establishment has this id
            sqlalchemy.exc.IntegrityError: If the slug is already taken
        """
        establishment = self.fetch_by_key(key)
        if establishment is None:
            raise EstablishmentNotFound(f"No establishment with id {key!r}")
        establishment.slug = slug
        self._commit()
        return establishment

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
