"""Reusable seed data fixtures for integration tests."""

import pytest

from tests.factories import InMemoryTeaRepository, make_tea

SENCHA_ID = "65f1c0de0000000000000001"
ASSAM_ID = "65f1c0de0000000000000002"


@pytest.fixture
def seeded_repo(repo: InMemoryTeaRepository) -> InMemoryTeaRepository:
    """Seed two teas with fixed ids."""
    repo.teas[SENCHA_ID] = make_tea(id=SENCHA_ID, name="Sencha", category="Unoxidized")
    repo.teas[ASSAM_ID] = make_tea(id=ASSAM_ID, name="Assam", category="Oxidized")
    return repo
