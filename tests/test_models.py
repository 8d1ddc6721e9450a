"""
Tests for entity records: field validation, enums, aliases, immutability.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import Contract, Crop, CropStatus, User


def _crop(**overrides) -> dict:
    data = {
        "id": "c1",
        "farmerId": "f1",
        "cropName": "Tomato",
        "area": 2.5,
        "seedDate": "2024-03-15",
        "expectedHarvest": "2024-06-15",
        "price": 45000,
    }
    data.update(overrides)
    return data


def test_crop_defaults_and_aliases() -> None:
    """camelCase input maps onto snake_case fields; status defaults to pending."""
    crop = Crop.model_validate(_crop())
    assert crop.farmer_id == "f1"
    assert crop.status is CropStatus.PENDING
    assert crop.images == () and crop.agent_notes == ()
    dumped = crop.model_dump(by_alias=True)
    assert dumped["expectedHarvest"] == "2024-06-15"
    assert "expected_harvest" not in dumped


@pytest.mark.parametrize("field,value", [
    ("area", 0),
    ("area", -1.5),
    ("price", 0),
    ("status", "harvested"),
    ("seedDate", "15/03/2024"),
])
def test_crop_rejects_bad_values(field: str, value) -> None:
    with pytest.raises(ValidationError):
        Crop.model_validate(_crop(**{field: value}))


def test_harvest_must_follow_seed_date() -> None:
    with pytest.raises(ValidationError):
        Crop.model_validate(_crop(expectedHarvest="2024-03-15"))
    with pytest.raises(ValidationError):
        Crop.model_validate(_crop(expectedHarvest="2024-01-01"))


def test_at_most_five_images() -> None:
    Crop.model_validate(_crop(images=[f"img{i}.png" for i in range(5)]))
    with pytest.raises(ValidationError):
        Crop.model_validate(_crop(images=[f"img{i}.png" for i in range(6)]))


def test_unknown_field_rejected() -> None:
    with pytest.raises(ValidationError):
        Crop.model_validate(_crop(agentId="a1"))


def test_records_are_frozen() -> None:
    crop = Crop.model_validate(_crop())
    with pytest.raises(ValidationError):
        crop.status = CropStatus.SOLD


def test_user_wallet_cannot_go_negative() -> None:
    with pytest.raises(ValidationError):
        User.model_validate({"id": "u1", "name": "X", "role": "farmer", "walletBalance": -1})
    with pytest.raises(ValidationError):
        User.model_validate({"id": "u1", "name": "X", "role": "buyer"})


def test_contract_milestones_preserved_and_unique() -> None:
    contract = Contract.model_validate({
        "id": "k1", "cropId": "c1", "farmerId": "f1", "distributorId": "d1", "price": 100,
        "milestones": [{"id": "1", "title": "Advance", "amount": 30, "status": "pending"}],
    })
    assert [m.model_dump() for m in contract.milestones] == [
        {"id": "1", "title": "Advance", "amount": 30.0, "status": "pending", "date": None}
    ]
    assert contract.created_at
    with pytest.raises(ValidationError):
        Contract.model_validate({
            "id": "k1", "cropId": "c1", "farmerId": "f1", "distributorId": "d1", "price": 100,
            "milestones": [
                {"id": "1", "title": "A", "amount": 30},
                {"id": "1", "title": "B", "amount": 70},
            ],
        })
