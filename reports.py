from typing import Any, Dict, Iterable, List, Optional

from models import Contract, ContractStatus, Crop, CropStatus, MilestoneStatus, Priority, Role, TaskStatus
from store import DomainStore

LISTED_STATUSES = (CropStatus.VERIFIED, CropStatus.GROWING)


def marketplace(crops: Iterable[Crop], q: Optional[str] = None, crop_filter: str = "all") -> List[Crop]:
    """Crops open to distributors: verified or growing, matched on name/location."""
    term = (q or "").strip().lower()
    flt = (crop_filter or "all").strip().lower()
    out = []
    for crop in crops:
        if crop.status not in LISTED_STATUSES:
            continue
        if term and term not in crop.crop_name.lower() and term not in crop.location.lower():
            continue
        if flt != "all" and flt not in crop.crop_name.lower():
            continue
        out.append(crop)
    return out


def contract_tab_counts(contracts: Iterable[Contract]) -> Dict[str, int]:
    counts = {"active": 0, "completed": 0, "cancelled": 0, "draft": 0}
    for c in contracts:
        counts[c.status.value] += 1
    return counts


def milestone_balance(contract: Contract) -> Dict[str, Any]:
    total = sum(m.amount for m in contract.milestones)
    paid = sum(m.amount for m in contract.milestones if m.status == MilestoneStatus.COMPLETED)
    return {
        "contract_id": contract.id,
        "price": contract.price,
        "milestone_total": total,
        "paid_amount": paid,
        "outstanding_amount": total - paid,
        "unallocated_amount": contract.price - total,
        "balanced": abs(contract.price - total) < 1e-6,
    }


def _by_status(items: Iterable[Any], statuses) -> Dict[str, int]:
    counts = {s.value: 0 for s in statuses}
    for it in items:
        counts[it.status.value] += 1
    return counts


def dashboard_summary(store: DomainStore, user_id: str) -> Dict[str, Any]:
    user = store.get_user(user_id)
    summary: Dict[str, Any] = {"user_id": user.id, "name": user.name, "role": user.role.value,
                               "wallet_balance": user.wallet_balance}

    if user.role == Role.FARMER:
        crops = [c for c in store.list_crops() if c.farmer_id == user.id]
        contracts = [c for c in store.list_contracts() if c.farmer_id == user.id]
        summary.update({
            "total_crops": len(crops),
            "total_area_acres": sum(c.area for c in crops),
            "listed_value": sum(c.price for c in crops),
            "crops_by_status": _by_status(crops, CropStatus),
            "contracts_by_status": _by_status(contracts, ContractStatus),
        })
    elif user.role == Role.DISTRIBUTOR:
        contracts = [c for c in store.list_contracts() if c.distributor_id == user.id]
        live = [c for c in contracts if c.status in (ContractStatus.ACTIVE, ContractStatus.COMPLETED)]
        summary.update({
            "total_contracts": len(contracts),
            "contracts_by_status": _by_status(contracts, ContractStatus),
            "committed_value": sum(c.price for c in live),
            "marketplace_crops": len(marketplace(store.list_crops())),
        })
    else:
        tasks = [t for t in store.list_verification_tasks() if t.agent_id == user.id]
        pending = [t for t in tasks if t.status == TaskStatus.PENDING]
        summary.update({
            "total_tasks": len(tasks),
            "tasks_by_status": _by_status(tasks, TaskStatus),
            "high_priority_pending": sum(1 for t in pending if t.priority == Priority.HIGH),
            "crops_awaiting_verification": len(store.pending_verifications()),
        })
    return summary
