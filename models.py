from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

MAX_CROP_IMAGES = 5


class CropStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    GROWING = "growing"
    READY = "ready"
    SOLD = "sold"


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Role(str, Enum):
    FARMER = "farmer"
    DISTRIBUTOR = "distributor"
    AGENT = "agent"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _parse_date(value: str) -> date:
    # accepts "YYYY-MM-DD" as well as full ISO timestamps
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value).date()


def _check_iso(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        _parse_date(value)
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO date (YYYY-MM-DD)")
    return value


class Record(BaseModel):
    """Base for store records: camelCase aliases, unknown fields rejected, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    id: str = Field(..., min_length=1)


class Crop(Record):
    farmer_id: str = Field(..., min_length=1)
    crop_name: str = Field(..., min_length=1)
    location: str = ""
    area: float = Field(..., gt=0, allow_inf_nan=False)  # acres
    seed_date: str
    expected_harvest: str
    status: CropStatus = CropStatus.PENDING
    price: float = Field(..., gt=0, allow_inf_nan=False)
    images: Tuple[str, ...] = Field((), max_length=MAX_CROP_IMAGES)
    agent_notes: Tuple[str, ...] = ()
    verification_date: Optional[str] = None
    contract_id: Optional[str] = None

    @field_validator("seed_date", "expected_harvest", "verification_date")
    @classmethod
    def check_dates(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso(v)

    @model_validator(mode="after")
    def check_harvest_after_seed(self):
        if _parse_date(self.expected_harvest) <= _parse_date(self.seed_date):
            raise ValueError("expectedHarvest must be after seedDate")
        return self


class Milestone(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    status: MilestoneStatus = MilestoneStatus.PENDING
    date: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _check_iso(v)


class Contract(Record):
    crop_id: str = Field(..., min_length=1)
    farmer_id: str = Field(..., min_length=1)
    distributor_id: str = Field(..., min_length=1)
    agent_id: Optional[str] = None
    price: float = Field(..., gt=0, allow_inf_nan=False)
    status: ContractStatus = ContractStatus.DRAFT
    terms: str = ""
    milestones: Tuple[Milestone, ...] = ()
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

    @field_validator("milestones")
    @classmethod
    def check_unique_milestone_ids(cls, v: Tuple[Milestone, ...]) -> Tuple[Milestone, ...]:
        ids = [m.id for m in v]
        if len(ids) != len(set(ids)):
            raise ValueError("milestone ids must be unique within a contract")
        return v


class User(Record):
    name: str = Field(..., min_length=1)
    phone: str = ""
    role: Role
    location: str = ""
    wallet_balance: float = Field(0.0, ge=0, allow_inf_nan=False)
    bio: Optional[str] = None


class VerificationTask(Record):
    crop_id: str = Field(..., min_length=1)
    agent_id: str = Field(..., min_length=1)
    farmer_id: str = Field(..., min_length=1)
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    notes: str = ""
    photos: Tuple[str, ...] = ()
    location: str = ""
    scheduled_date: str

    @field_validator("scheduled_date")
    @classmethod
    def check_date(cls, v: str) -> str:
        return _check_iso(v)
