"""
In-memory domain store for crops, contracts, users and verification tasks.

One `DomainStore` instance is the single source of truth for a running
process. Callers receive it explicitly (the API injects it with
`Depends(get_store)`); there is no module-level instance.

Every collection follows the same contract:

    add_<entity>(fields)          -> new record, id assigned here
    update_<entity>(id, partial)  -> new record with `partial` merged in
    get_<entity>(id)              -> record or NotFoundError
    list_<entities>()             -> snapshot list in insertion order

Records are frozen pydantic models. An update never mutates the stored
record; it validates a merged copy and swaps it in, so earlier references
stay valid. Each successful write is appended to a hash-chained journal.
"""

import copy
import threading
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

import config
from errors import InvalidTransitionError, NotFoundError, ValidationError
from logger import get_logger
from models import (
    Contract,
    Crop,
    CropStatus,
    Record,
    Role,
    TaskStatus,
    User,
    VerificationTask,
)
from utils import GENESIS, compute_hash, new_id, now_iso, verify_chain

logger = get_logger()

CROP = "crop"
CONTRACT = "contract"
USER = "user"
TASK = "verification_task"

# allowed targets per current status when strict transitions are on
CROP_TRANSITIONS: Dict[CropStatus, Tuple[CropStatus, ...]] = {
    CropStatus.PENDING: (CropStatus.PENDING, CropStatus.VERIFIED),
    CropStatus.VERIFIED: (CropStatus.VERIFIED, CropStatus.GROWING),
    CropStatus.GROWING: (CropStatus.GROWING, CropStatus.READY),
    CropStatus.READY: (CropStatus.READY, CropStatus.SOLD),
    CropStatus.SOLD: (CropStatus.SOLD,),
}

DECISIONS = ("approve", "reject")


def _as_dict(fields: Any) -> Dict[str, Any]:
    if fields is None:
        return {}
    if isinstance(fields, BaseModel):
        return fields.model_dump(exclude_unset=True)
    if isinstance(fields, Mapping):
        return dict(fields)
    raise TypeError(f"expected a mapping of fields, got {type(fields).__name__}")


def _normalize_keys(model: Type[Record], data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase keys onto field names; unknown keys pass through to fail validation."""
    by_alias = {to_camel(name): name for name in model.model_fields}
    return {by_alias.get(k, k): v for k, v in data.items()}


class DomainStore:
    def __init__(self, strict_transitions: Optional[bool] = None):
        if strict_transitions is None:
            strict_transitions = config.strict_crop_transitions()
        self.strict_transitions = strict_transitions

        self._crops: Dict[str, Crop] = {}
        self._contracts: Dict[str, Contract] = {}
        self._users: Dict[str, User] = {}
        self._tasks: Dict[str, VerificationTask] = {}
        self._tables: Dict[str, Tuple[Type[Record], Dict[str, Any]]] = {
            CROP: (Crop, self._crops),
            CONTRACT: (Contract, self._contracts),
            USER: (User, self._users),
            TASK: (VerificationTask, self._tasks),
        }
        self._journal: List[Dict[str, Any]] = []
        self._lock = threading.RLock()

    # ---------- generic plumbing ----------
    def _build(self, entity: str, data: Dict[str, Any]) -> Record:
        model, _ = self._tables[entity]
        try:
            return model.model_validate(data)
        except PydanticValidationError as exc:
            err = ValidationError.from_pydantic(entity, exc)
            logger.warning("Rejected %s: %s", entity, err.errors)
            raise err from exc

    def _merge(self, entity: str, current: Record, changes: Dict[str, Any]) -> Record:
        model, _ = self._tables[entity]
        changes = _normalize_keys(model, changes)
        if "id" in changes and changes["id"] != current.id:
            raise ValidationError(
                f"{entity} id cannot be changed",
                [{"loc": ["id"], "msg": "id is immutable", "type": "immutable"}],
            )
        merged = current.model_dump()
        merged.update(changes)
        return self._build(entity, merged)

    def _record(self, event: str, entity: str, record: Record) -> None:
        payload = {
            "event": event,
            "entity": entity,
            "id": record.id,
            "data": record.model_dump(mode="json", by_alias=True),
        }
        prev_hash = self._journal[-1]["hash"] if self._journal else GENESIS
        ts = now_iso()
        self._journal.append({
            "type": event,
            "entity": entity,
            "entity_id": record.id,
            "payload": payload,
            "timestamp": ts,
            "prev_hash": prev_hash,
            "hash": compute_hash(prev_hash, payload, ts),
        })

    def _get(self, entity: str, record_id: str) -> Record:
        _, table = self._tables[entity]
        record = table.get(record_id)
        if record is None:
            raise NotFoundError(entity, record_id)
        return record

    def _add(self, entity: str, fields: Any) -> Record:
        model, table = self._tables[entity]
        data = _normalize_keys(model, _as_dict(fields))
        if "id" in data:
            raise ValidationError(
                f"{entity} id is assigned by the store",
                [{"loc": ["id"], "msg": "id must not be supplied", "type": "forbidden"}],
            )
        with self._lock:
            record_id = new_id()
            while record_id in table:
                record_id = new_id()
            data["id"] = record_id
            record = self._build(entity, data)
            self._check(entity, record)
            table[record.id] = record
            self._record("added", entity, record)
        logger.info("Added %s %s", entity, record.id)
        return record

    def _update(
        self,
        entity: str,
        record_id: str,
        changes: Any,
        guard: Optional[Callable[[Record, Record], None]] = None,
    ) -> Record:
        _, table = self._tables[entity]
        data = _as_dict(changes)
        with self._lock:
            current = table.get(record_id)
            if current is None:
                logger.warning("Update of unknown %s %s", entity, record_id)
                raise NotFoundError(entity, record_id)
            updated = self._merge(entity, current, data)
            if guard:
                guard(current, updated)
            self._check(entity, updated)
            table[record_id] = updated
            self._record("updated", entity, updated)
        logger.info("Updated %s %s: %s", entity, record_id, sorted(data))
        return updated

    # ---------- cross-entity checks ----------
    def _require_user(self, user_id: str, role: Role, field: str) -> None:
        user = self._users.get(user_id)
        if user is None or user.role != role:
            raise ValidationError(
                f"{field} must reference an existing {role.value}",
                [{"loc": [field], "msg": f"no {role.value} with id '{user_id}'", "type": "reference"}],
            )

    def _check(self, entity: str, record: Record, deferred: Optional[List[Crop]] = None) -> None:
        if entity == CROP:
            self._require_user(record.farmer_id, Role.FARMER, "farmerId")
            if record.contract_id is not None:
                if deferred is not None:
                    deferred.append(record)
                else:
                    self._get(CONTRACT, record.contract_id)
        elif entity == CONTRACT:
            crop = self._get(CROP, record.crop_id)
            self._require_user(record.farmer_id, Role.FARMER, "farmerId")
            self._require_user(record.distributor_id, Role.DISTRIBUTOR, "distributorId")
            if record.agent_id is not None:
                self._require_user(record.agent_id, Role.AGENT, "agentId")
            if crop.farmer_id != record.farmer_id:
                raise ValidationError(
                    "contract farmer does not own the crop",
                    [{"loc": ["farmerId"], "msg": f"crop {crop.id} belongs to {crop.farmer_id}", "type": "reference"}],
                )
            total = sum(m.amount for m in record.milestones)
            if record.milestones and abs(total - record.price) > 1e-6:
                logger.warning(
                    "Contract %s milestones total %.2f but price is %.2f", record.id, total, record.price
                )
        elif entity == TASK:
            self._get(CROP, record.crop_id)
            self._require_user(record.agent_id, Role.AGENT, "agentId")
            self._require_user(record.farmer_id, Role.FARMER, "farmerId")

    def _guard_user_role(self, current: User, updated: User) -> None:
        if current.role == updated.role:
            return
        uid = current.id
        refs = [("crop", c.id) for c in self._crops.values() if c.farmer_id == uid]
        refs += [
            ("contract", c.id) for c in self._contracts.values()
            if uid in (c.farmer_id, c.distributor_id, c.agent_id)
        ]
        refs += [("verification_task", t.id) for t in self._tasks.values() if uid in (t.farmer_id, t.agent_id)]
        if refs:
            logger.warning("Rejected role change for user %s: %d references", uid, len(refs))
            raise ValidationError(
                f"user {uid} is still referenced as {current.role.value}",
                [{"loc": ["role"], "msg": f"referenced by {kind} {rid}", "type": "reference"} for kind, rid in refs],
            )

    def _guard_crop_status(self, current: Crop, updated: Crop) -> None:
        if not self.strict_transitions or current.status == updated.status:
            return
        if updated.status not in CROP_TRANSITIONS[current.status]:
            logger.warning("Rejected crop %s transition %s -> %s", current.id, current.status.value, updated.status.value)
            raise InvalidTransitionError(current.status.value, updated.status.value)

    # ---------- crops ----------
    def add_crop(self, fields: Any) -> Crop:
        return self._add(CROP, fields)

    def update_crop(self, crop_id: str, changes: Any) -> Crop:
        return self._update(CROP, crop_id, changes, guard=self._guard_crop_status)

    def get_crop(self, crop_id: str) -> Crop:
        return self._get(CROP, crop_id)

    def list_crops(self) -> List[Crop]:
        with self._lock:
            return list(self._crops.values())

    def append_agent_note(self, crop_id: str, note: str) -> Crop:
        note = (note or "").strip()
        if not note:
            raise ValidationError(
                "note must not be empty",
                [{"loc": ["note"], "msg": "empty note", "type": "missing"}],
            )
        with self._lock:
            crop = self.get_crop(crop_id)
            return self.update_crop(crop_id, {"agent_notes": [*crop.agent_notes, note]})

    def pending_verifications(self) -> List[Crop]:
        return [c for c in self.list_crops() if c.status == CropStatus.PENDING]

    # ---------- contracts ----------
    def create_contract(self, fields: Any) -> Contract:
        return self._add(CONTRACT, fields)

    add_contract = create_contract

    def update_contract(self, contract_id: str, changes: Any) -> Contract:
        return self._update(CONTRACT, contract_id, changes)

    def get_contract(self, contract_id: str) -> Contract:
        return self._get(CONTRACT, contract_id)

    def list_contracts(self) -> List[Contract]:
        with self._lock:
            return list(self._contracts.values())

    # ---------- users ----------
    def add_user(self, fields: Any) -> User:
        return self._add(USER, fields)

    def update_user(self, user_id: str, changes: Any) -> User:
        return self._update(USER, user_id, changes, guard=self._guard_user_role)

    def get_user(self, user_id: str) -> User:
        return self._get(USER, user_id)

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users.values())

    # ---------- verification tasks ----------
    def add_verification_task(self, fields: Any) -> VerificationTask:
        return self._add(TASK, fields)

    def update_verification_task(self, task_id: str, changes: Any) -> VerificationTask:
        return self._update(TASK, task_id, changes)

    def get_verification_task(self, task_id: str) -> VerificationTask:
        return self._get(TASK, task_id)

    def list_verification_tasks(self) -> List[VerificationTask]:
        with self._lock:
            return list(self._tasks.values())

    def tasks_for_crop(self, crop_id: str) -> List[VerificationTask]:
        return [t for t in self.list_verification_tasks() if t.crop_id == crop_id]

    # ---------- composite ----------
    def complete_verification(
        self,
        crop_id: str,
        task_id: Optional[str] = None,
        decision: str = "approve",
        notes: Optional[str] = None,
    ) -> Tuple[Crop, Optional[VerificationTask]]:
        """
        Record an agent's decision on a crop and close its verification task together.

        approve -> crop becomes verified; reject -> crop stays pending. Both stamp
        the verification date and append the note. When `task_id` is None the
        first task for the crop is used, if any. Both records are validated
        before either is written.
        """
        if decision not in DECISIONS:
            raise ValidationError(
                f"unknown decision '{decision}'",
                [{"loc": ["decision"], "msg": "expected approve or reject", "type": "enum"}],
            )
        note = (notes or "").strip() or ("Approved by agent" if decision == "approve" else "Rejected by agent")

        with self._lock:
            crop = self.get_crop(crop_id)
            if task_id is not None:
                task = self.get_verification_task(task_id)
                if task.crop_id != crop_id:
                    raise ValidationError(
                        "task does not belong to crop",
                        [{"loc": ["taskId"], "msg": f"task {task_id} is for crop {task.crop_id}", "type": "reference"}],
                    )
            else:
                found = self.tasks_for_crop(crop_id)
                task = found[0] if found else None

            new_crop = self._merge(CROP, crop, {
                "status": CropStatus.VERIFIED if decision == "approve" else CropStatus.PENDING,
                "verification_date": now_iso(),
                "agent_notes": [*crop.agent_notes, note],
            })
            self._guard_crop_status(crop, new_crop)
            self._check(CROP, new_crop)
            new_task = None
            if task is not None:
                new_task = self._merge(TASK, task, {"status": TaskStatus.COMPLETED, "notes": note})

            self._crops[crop_id] = new_crop
            self._record("updated", CROP, new_crop)
            if new_task is not None:
                self._tasks[new_task.id] = new_task
                self._record("updated", TASK, new_task)

        logger.info("Crop %s %sd by agent (task %s)", crop_id, decision, new_task.id if new_task else "-")
        return new_crop, new_task

    # ---------- seeding ----------
    def load(
        self,
        users: Iterable[Any] = (),
        crops: Iterable[Any] = (),
        contracts: Iterable[Any] = (),
        tasks: Iterable[Any] = (),
    ) -> None:
        """Insert complete records (ids included), e.g. sample data at startup."""
        # crops may name a contract loaded after them
        linked: List[Crop] = []
        with self._lock:
            for entity, rows in ((USER, users), (CROP, crops), (CONTRACT, contracts), (TASK, tasks)):
                model, table = self._tables[entity]
                for row in rows:
                    record = row if isinstance(row, model) else self._build(entity, _normalize_keys(model, _as_dict(row)))
                    if record.id in table:
                        raise ValidationError(
                            f"duplicate {entity} id",
                            [{"loc": ["id"], "msg": f"'{record.id}' already exists", "type": "duplicate"}],
                        )
                    self._check(entity, record, deferred=linked)
                    table[record.id] = record
                    self._record("loaded", entity, record)
            for crop in linked:
                self._get(CONTRACT, crop.contract_id)
        logger.info(
            "Store loaded: %d users, %d crops, %d contracts, %d tasks",
            len(self._users), len(self._crops), len(self._contracts), len(self._tasks),
        )

    # ---------- journal ----------
    def history(self) -> List[Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._journal)

    def verify_history(self) -> bool:
        with self._lock:
            return verify_chain(self._journal)
