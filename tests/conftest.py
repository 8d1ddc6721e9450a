from __future__ import annotations

import pytest

from seed import sample_store
from store import DomainStore


@pytest.fixture
def store() -> DomainStore:
    """Empty permissive store with one user per role."""
    s = DomainStore(strict_transitions=False)
    s.load(users=[
        {"id": "f1", "name": "Ravi", "role": "farmer", "location": "Guntur, AP"},
        {"id": "f2", "name": "Anitha", "role": "farmer", "location": "Krishna, AP"},
        {"id": "d1", "name": "Coastal Agro", "role": "distributor", "walletBalance": 100000},
        {"id": "a1", "name": "Suresh", "role": "agent"},
    ])
    return s


@pytest.fixture
def strict_store(store: DomainStore) -> DomainStore:
    store.strict_transitions = True
    return store


@pytest.fixture
def seeded() -> DomainStore:
    return sample_store(strict_transitions=False)


@pytest.fixture
def rice_fields() -> dict:
    return {
        "farmerId": "f1",
        "cropName": "Rice",
        "area": 2,
        "seedDate": "2024-01-01",
        "expectedHarvest": "2024-05-01",
        "price": 10000,
        "images": [],
        "agentNotes": [],
    }
