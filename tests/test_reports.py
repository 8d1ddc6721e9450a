"""
Tests for derived views over the sample data.
"""

from __future__ import annotations

import pytest

import reports
from errors import NotFoundError
from store import DomainStore


def test_marketplace_lists_verified_and_growing(seeded: DomainStore) -> None:
    names = [c.crop_name for c in reports.marketplace(seeded.list_crops())]
    assert names == ["Tomato", "Rice"]


def test_marketplace_search_and_filter(seeded: DomainStore) -> None:
    crops = seeded.list_crops()
    assert [c.crop_name for c in reports.marketplace(crops, q="krishna")] == ["Rice"]
    assert [c.crop_name for c in reports.marketplace(crops, q="TOM")] == ["Tomato"]
    assert [c.crop_name for c in reports.marketplace(crops, crop_filter="rice")] == ["Rice"]
    assert reports.marketplace(crops, q="wheat") == []


def test_marketplace_hides_pending_and_sold(seeded: DomainStore) -> None:
    seeded.update_crop("1", {"status": "sold"})
    seeded.update_crop("2", {"status": "pending"})
    assert reports.marketplace(seeded.list_crops()) == []


def test_contract_tab_counts(seeded: DomainStore) -> None:
    assert reports.contract_tab_counts(seeded.list_contracts()) == {
        "active": 1, "completed": 0, "cancelled": 0, "draft": 0,
    }


def test_milestone_balance(seeded: DomainStore) -> None:
    balance = reports.milestone_balance(seeded.get_contract("1"))
    assert balance["milestone_total"] == 45000
    assert balance["paid_amount"] == 15000
    assert balance["outstanding_amount"] == 30000
    assert balance["unallocated_amount"] == 0
    assert balance["balanced"] is True


def test_farmer_dashboard(seeded: DomainStore) -> None:
    s = reports.dashboard_summary(seeded, "farmer1")
    assert s["role"] == "farmer"
    assert s["total_crops"] == 1
    assert s["total_area_acres"] == 2.5
    assert s["listed_value"] == 45000
    assert s["crops_by_status"]["growing"] == 1
    assert s["contracts_by_status"]["active"] == 1


def test_distributor_dashboard(seeded: DomainStore) -> None:
    s = reports.dashboard_summary(seeded, "distributor1")
    assert s["total_contracts"] == 1
    assert s["committed_value"] == 45000
    assert s["marketplace_crops"] == 2


def test_agent_dashboard(seeded: DomainStore) -> None:
    s = reports.dashboard_summary(seeded, "agent1")
    assert s["total_tasks"] == 1
    assert s["tasks_by_status"] == {"pending": 1, "completed": 0}
    assert s["high_priority_pending"] == 1
    assert s["crops_awaiting_verification"] == 0


def test_dashboard_unknown_user(seeded: DomainStore) -> None:
    with pytest.raises(NotFoundError):
        reports.dashboard_summary(seeded, "ghost")
