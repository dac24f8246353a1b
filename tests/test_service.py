"""
Tests for slug-backed lookup, rename and create.
"""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError

from bizslug.resolver import SlugResolver, MalformedBaseError
from bizslug.service import create_establishment, find_by_slug, rename, share_link
from bizslug.storage import EstablishmentNotFound


@pytest.fixture
def resolver(store):
    return SlugResolver(store.exists)


class TestFindBySlug:
    """Test the public lookup path."""

    def test_finds_record(self, store, resolver):
        est = create_establishment(store, resolver, "Barbearia São José")
        assert find_by_slug(store, "barbeariasaojose").id == est.id

    def test_finds_suffixed_slug(self, store, resolver):
        create_establishment(store, resolver, "Salão")
        second = create_establishment(store, resolver, "Salão!")

        assert second.slug == "salao-2"
        assert find_by_slug(store, "salao-2").id == second.id

    def test_not_found(self, store):
        assert find_by_slug(store, "nobody") is None

    def test_exact_match_only(self, store, resolver):
        """Lookup agrees with exists(): no trimming, no case folding."""
        create_establishment(store, resolver, "Salão")

        assert not store.exists(" salao ")
        assert find_by_slug(store, " salao ") is None
        assert find_by_slug(store, "salao ") is None
        assert find_by_slug(store, "SALAO") is None
        assert find_by_slug(store, "salao") is not None

    @pytest.mark.parametrize("slug", ["", "   ", None, 42])
    def test_bad_input_skips_store(self, slug):
        store = Mock()
        assert find_by_slug(store, slug) is None
        store.fetch_by_slug.assert_not_called()


class TestRename:
    """Test slug re-derivation on rename."""

    def test_rename_to_new_name(self, store, resolver):
        est = create_establishment(store, resolver, "Salão")

        slug = rename(store, resolver, est.id, "Estúdio de Beleza")

        assert slug == "estudiodebeleza"
        assert store.fetch_by_key(est.id).slug == "estudiodebeleza"

    def test_rename_to_own_name_keeps_slug(self, store, resolver):
        est = create_establishment(store, resolver, "Salão")

        assert rename(store, resolver, est.id, "SALÃO") == "salao"

    def test_rename_disambiguates_against_others(self, store, resolver):
        create_establishment(store, resolver, "Salão")
        other = create_establishment(store, resolver, "Spa")

        assert rename(store, resolver, other.id, "Salão") == "salao-2"

    def test_rename_missing_record(self, store, resolver, quiet_logger):
        with pytest.raises(EstablishmentNotFound):
            rename(store, resolver, "missing", "Salão")

        metrics = quiet_logger.get_metrics()
        assert metrics["rename_failures"] == 1
        assert metrics["errors_by_type"]["EstablishmentNotFound"] == 1

    def test_lost_race_keeps_old_slug(self, store, resolver):
        """A stale pre-flight check loses to the UNIQUE constraint."""
        create_establishment(store, resolver, "Salão")
        other = create_establishment(store, resolver, "Spa")
        stale = SlugResolver(lambda candidate, exclude_key: False)

        with pytest.raises(IntegrityError):
            rename(store, stale, other.id, "Salão")

        assert store.fetch_by_key(other.id).slug == "spa"

    def test_malformed_base_propagates(self, store, resolver):
        est = create_establishment(store, resolver, "Salão")

        with pytest.raises(MalformedBaseError):
            rename(store, resolver, est.id, "ab")

        assert store.fetch_by_key(est.id).slug == "salao"

    def test_malformed_base_counts_as_rename_failure(self, store, resolver, quiet_logger):
        est = create_establishment(store, resolver, "Salão")

        with pytest.raises(MalformedBaseError):
            rename(store, resolver, est.id, "ab")

        metrics = quiet_logger.get_metrics()
        assert metrics["rename_failures"] == 1
        assert metrics["errors_by_type"]["MalformedBaseError"] == 1
        assert metrics["renames"] == 0

    def test_exists_failure_counts_as_rename_failure(self, store, quiet_logger):
        est = create_establishment(store, SlugResolver(store.exists), "Salão")

        def broken(candidate, exclude_key):
            raise ConnectionError("store unavailable")

        with pytest.raises(ConnectionError):
            rename(store, SlugResolver(broken), est.id, "Spa")

        metrics = quiet_logger.get_metrics()
        assert metrics["rename_failures"] == 1
        assert metrics["errors_by_type"]["ConnectionError"] == 1
        assert store.fetch_by_key(est.id).slug == "salao"

    def test_records_rename(self, store, resolver, quiet_logger):
        est = create_establishment(store, resolver, "Salão")
        rename(store, resolver, est.id, "Spa")

        assert quiet_logger.get_metrics()["renames"] == 1


class TestCreateEstablishment:
    """Test establishment creation."""

    def test_creates_with_slug(self, store, resolver):
        est = create_establishment(store, resolver, "  Salão & Spa  ")

        assert est.name == "Salão & Spa"
        assert est.slug == "salaospa"

    def test_sequential_duplicates(self, store, resolver):
        slugs = [create_establishment(store, resolver, "Salão").slug for _ in range(3)]
        assert slugs == ["salao", "salao-2", "salao-3"]

    def test_blank_name_rejected(self, store, resolver):
        with pytest.raises(ValueError, match="name"):
            create_establishment(store, resolver, "   ")

        assert store.list_all() == []

    def test_malformed_base_is_counted(self, store, resolver, quiet_logger):
        with pytest.raises(MalformedBaseError):
            create_establishment(store, resolver, "ab")

        assert quiet_logger.get_metrics()["errors_by_type"]["MalformedBaseError"] == 1
        assert store.list_all() == []

    def test_lost_race_raises(self, store, resolver):
        create_establishment(store, resolver, "Salão")
        stale = SlugResolver(lambda candidate, exclude_key: False)

        with pytest.raises(IntegrityError):
            create_establishment(store, stale, "Salão")

        assert len(store.list_all()) == 1


class TestShareLink:
    """Test public booking link construction."""

    def test_joins_base_and_slug(self):
        assert share_link("https://agenda.example.com", "salao") == "https://agenda.example.com/salao"

    def test_trims_trailing_slash(self):
        assert share_link("https://agenda.example.com/", "salao-2") == "https://agenda.example.com/salao-2"

    def test_no_slug(self):
        assert share_link("https://agenda.example.com", "") is None
        assert share_link("https://agenda.example.com", None) is None
