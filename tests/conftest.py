import pytest

from assessment_engine.seeds import SeedStore

from helpers.factories import fixed_clock, gated_pair
from helpers.stores import InMemoryStore


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def gated():
    return gated_pair()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture(scope="session")
def seeds():
    s = SeedStore()
    s.load()
    return s
