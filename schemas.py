from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Any, Dict, List, Literal

from models import (
    Contract,
    ContractStatus,
    Crop,
    CropStatus,
    Milestone,
    Priority,
    Role,
    TaskStatus,
    VerificationTask,
)


class Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ---------- crops ----------
class CropCreate(Body):
    farmer_id: str
    crop_name: str
    location: str = ""
    area: float
    seed_date: str  # YYYY-MM-DD
    expected_harvest: str  # YYYY-MM-DD
    status: CropStatus = CropStatus.PENDING
    price: float
    images: List[str] = []
    agent_notes: List[str] = []
    verification_date: Optional[str] = None
    contract_id: Optional[str] = None


class CropUpdate(Body):
    farmer_id: Optional[str] = None
    crop_name: Optional[str] = None
    location: Optional[str] = None
    area: Optional[float] = None
    seed_date: Optional[str] = None
    expected_harvest: Optional[str] = None
    status: Optional[CropStatus] = None
    price: Optional[float] = None
    images: Optional[List[str]] = None
    agent_notes: Optional[List[str]] = None
    verification_date: Optional[str] = None
    contract_id: Optional[str] = None


class AgentNote(Body):
    note: str = Field(..., min_length=1)


class CropList(Body):
    items: List[Crop]
    total: int
    page: int
    page_size: int


# ---------- contracts ----------
class ContractCreate(Body):
    crop_id: str
    farmer_id: str
    distributor_id: str
    agent_id: Optional[str] = None
    price: float
    status: ContractStatus = ContractStatus.DRAFT
    terms: str = ""
    milestones: List[Milestone] = []
    created_at: Optional[str] = None


class ContractUpdate(Body):
    agent_id: Optional[str] = None
    price: Optional[float] = None
    status: Optional[ContractStatus] = None
    terms: Optional[str] = None
    milestones: Optional[List[Milestone]] = None


class ContractList(Body):
    items: List[Contract]
    total: int
    counts: Dict[str, int]


class MilestoneBalance(Body):
    contract_id: str
    price: float
    milestone_total: float
    paid_amount: float
    outstanding_amount: float
    unallocated_amount: float
    balanced: bool


# ---------- users ----------
class UserCreate(Body):
    name: str
    phone: str = ""
    role: Role
    location: str = ""
    wallet_balance: float = 0.0
    bio: Optional[str] = None


class UserUpdate(Body):
    name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    wallet_balance: Optional[float] = None
    bio: Optional[str] = None


# ---------- verification ----------
class TaskCreate(Body):
    crop_id: str
    agent_id: str
    farmer_id: str
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    notes: str = ""
    photos: List[str] = []
    location: str = ""
    scheduled_date: str  # YYYY-MM-DD


class TaskUpdate(Body):
    agent_id: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = None
    photos: Optional[List[str]] = None
    location: Optional[str] = None
    scheduled_date: Optional[str] = None


class VerificationDecision(Body):
    crop_id: str
    task_id: Optional[str] = None
    decision: Literal["approve", "reject"] = "approve"
    notes: Optional[str] = None


class VerificationResult(Body):
    crop: Crop
    task: Optional[VerificationTask] = None


# ---------- journal ----------
class HistoryEntry(Body):
    type: str
    entity: str
    entity_id: str
    payload: Dict[str, Any]
    timestamp: str
    prev_hash: str
    hash: str


class HistoryCheck(Body):
    verified: bool
    events: int
