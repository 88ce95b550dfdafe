"""Tests for the emergency resource store."""
import pytest

from nafsy.shared.models import Language, Resource
from nafsy.services.crisis_detection.resources import SEED_RESOURCES, InMemoryResourceStore


@pytest.fixture
def store():
    return InMemoryResourceStore()


class TestSeededStore:
    """Queries against the bundled resources."""

    def test_arabic_saudi(self, store):
        resources = store.get_emergency_resources(Language.AR, country="SA")

        assert [r.phone for r in resources] == ["920033360", "997"]

    def test_english_global(self, store):
        resources = store.get_emergency_resources(Language.EN)

        assert [r.title for r in resources] == ["Crisis Text Line"]

    def test_english_with_country_keeps_global(self, store):
        resources = store.get_emergency_resources(Language.EN, country="US")

        assert [r.title for r in resources] == ["Crisis Text Line"]

    def test_other_country_excludes_saudi(self, store):
        assert store.get_emergency_resources(Language.AR, country="EG") == []

    def test_country_case_insensitive(self, store):
        assert len(store.get_emergency_resources(Language.AR, country="sa")) == 2

    def test_non_emergency_never_returned(self, store):
        for language in Language:
            assert all(r.is_emergency for r in store.get_emergency_resources(language))

    def test_limit(self, store):
        assert len(store.get_emergency_resources(Language.AR, limit=1)) == 1
        assert store.get_emergency_resources(Language.AR, limit=0) == []

    def test_seed_contains_non_emergency_entries(self):
        assert any(not r.is_emergency for r in SEED_RESOURCES)


class TestCustomStore:
    """Stores built from caller-supplied resources."""

    def test_empty_store(self):
        assert InMemoryResourceStore([]).get_emergency_resources(Language.EN) == []

    def test_add(self):
        store = InMemoryResourceStore([])
        resource = Resource(title="Local line", is_emergency=True, language="en", country="GB", phone="116123")
        store.add(resource)

        assert store.get_emergency_resources(Language.EN, country="GB") == [resource]
        assert store.get_emergency_resources(Language.EN, country="US") == []

    def test_resource_to_dict(self):
        data = SEED_RESOURCES[0].to_dict()

        assert data["isEmergency"] is True
        assert data["phone"] == "920033360"
        assert data["country"] == "SA"
