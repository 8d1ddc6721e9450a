import io
from typing import List, Optional

from fastapi import FastAPI, Depends, Request, Response, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import qrcode

import config
import reports
import schemas
from errors import InvalidTransitionError, NotFoundError, ValidationError
from logger import setup_logger
from models import Contract, Crop, CropStatus, User, VerificationTask
from schemas import (
    AgentNote,
    ContractCreate,
    ContractUpdate,
    CropCreate,
    CropUpdate,
    TaskCreate,
    TaskUpdate,
    UserCreate,
    UserUpdate,
    VerificationDecision,
)
from seed import seed_store
from store import DomainStore


def build_store() -> DomainStore:
    store = DomainStore(strict_transitions=config.strict_crop_transitions())
    if config.seed_sample_data():
        seed_store(store)
    return store


# ---------- Store ----------
def get_store(request: Request) -> DomainStore:
    return request.app.state.store


def create_app(store: Optional[DomainStore] = None) -> FastAPI:
    log = setup_logger(level=config.log_level(), log_file=config.log_file() or None)

    app = FastAPI(title="Farm Market Store", version="0.1.0")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup():
        if app.state.store is None:
            app.state.store = build_store()
            log.info("Store ready (strict transitions: %s)", app.state.store.strict_transitions)

    # ---------- Errors ----------
    @app.exception_handler(NotFoundError)
    def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={
            "error": "not_found", "detail": str(exc), "errors": [],
        })

    @app.exception_handler(InvalidTransitionError)
    def bad_transition(request: Request, exc: InvalidTransitionError):
        return JSONResponse(status_code=409, content={
            "error": "invalid_transition", "detail": exc.message, "errors": exc.errors,
        })

    @app.exception_handler(ValidationError)
    def invalid(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={
            "error": "validation_error", "detail": exc.message, "errors": exc.errors,
        })

    # ---------- APIs: crops ----------
    @app.post("/api/crops", response_model=Crop, status_code=201)
    def create_crop(body: CropCreate, store: DomainStore = Depends(get_store)):
        return store.add_crop(body)

    @app.get("/api/crops", response_model=schemas.CropList)
    def list_crops(
        q: Optional[str] = Query(None, description="search crop name / location"),
        status: Optional[CropStatus] = None,
        farmer_id: Optional[str] = Query(None, alias="farmerId"),
        page: int = Query(1, ge=1),
        page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
        store: DomainStore = Depends(get_store),
    ):
        rows = store.list_crops()
        if q:
            term = q.lower()
            rows = [c for c in rows if term in c.crop_name.lower() or term in c.location.lower()]
        if status:
            rows = [c for c in rows if c.status == status]
        if farmer_id:
            rows = [c for c in rows if c.farmer_id == farmer_id]
        start = (page - 1) * page_size
        return schemas.CropList(
            items=rows[start:start + page_size],
            total=len(rows),
            page=page,
            page_size=page_size,
        )

    @app.get("/api/crops/{crop_id}", response_model=Crop)
    def get_crop(crop_id: str, store: DomainStore = Depends(get_store)):
        return store.get_crop(crop_id)

    @app.patch("/api/crops/{crop_id}", response_model=Crop)
    def update_crop(crop_id: str, body: CropUpdate, store: DomainStore = Depends(get_store)):
        return store.update_crop(crop_id, body)

    @app.post("/api/crops/{crop_id}/notes", response_model=Crop)
    def add_note(crop_id: str, body: AgentNote, store: DomainStore = Depends(get_store)):
        return store.append_agent_note(crop_id, body.note)

    @app.get("/api/crops/{crop_id}/qrcode")
    def crop_qrcode(crop_id: str, store: DomainStore = Depends(get_store)):
        crop = store.get_crop(crop_id)
        url = f"{config.base_url()}/crops/{crop.id}"
        img = qrcode.make(url)
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return Response(content=buf.getvalue(), media_type="image/png")

    # ---------- APIs: contracts ----------
    @app.post("/api/contracts", response_model=Contract, status_code=201)
    def create_contract(body: ContractCreate, store: DomainStore = Depends(get_store)):
        return store.create_contract(body)

    @app.get("/api/contracts", response_model=schemas.ContractList)
    def list_contracts(
        tab: Optional[str] = Query(None, description="active / completed / cancelled"),
        user_id: Optional[str] = Query(None, alias="userId"),
        store: DomainStore = Depends(get_store),
    ):
        rows = store.list_contracts()
        if user_id:
            rows = [c for c in rows if user_id in (c.farmer_id, c.distributor_id, c.agent_id)]
        counts = reports.contract_tab_counts(rows)
        if tab:
            rows = [c for c in rows if c.status.value == tab]
        return schemas.ContractList(items=rows, total=len(rows), counts=counts)

    @app.get("/api/contracts/{contract_id}", response_model=Contract)
    def get_contract(contract_id: str, store: DomainStore = Depends(get_store)):
        return store.get_contract(contract_id)

    @app.patch("/api/contracts/{contract_id}", response_model=Contract)
    def update_contract(contract_id: str, body: ContractUpdate, store: DomainStore = Depends(get_store)):
        return store.update_contract(contract_id, body)

    @app.get("/api/contracts/{contract_id}/balance", response_model=schemas.MilestoneBalance)
    def contract_balance(contract_id: str, store: DomainStore = Depends(get_store)):
        return reports.milestone_balance(store.get_contract(contract_id))

    # ---------- APIs: users ----------
    @app.post("/api/users", response_model=User, status_code=201)
    def create_user(body: UserCreate, store: DomainStore = Depends(get_store)):
        return store.add_user(body)

    @app.get("/api/users", response_model=List[User])
    def list_users(store: DomainStore = Depends(get_store)):
        return store.list_users()

    @app.get("/api/users/{user_id}", response_model=User)
    def get_user(user_id: str, store: DomainStore = Depends(get_store)):
        return store.get_user(user_id)

    @app.patch("/api/users/{user_id}", response_model=User)
    def update_user(user_id: str, body: UserUpdate, store: DomainStore = Depends(get_store)):
        return store.update_user(user_id, body)

    # ---------- APIs: verification ----------
    @app.post("/api/tasks", response_model=VerificationTask, status_code=201)
    def create_task(body: TaskCreate, store: DomainStore = Depends(get_store)):
        return store.add_verification_task(body)

    @app.get("/api/tasks", response_model=List[VerificationTask])
    def list_tasks(
        agent_id: Optional[str] = Query(None, alias="agentId"),
        store: DomainStore = Depends(get_store),
    ):
        rows = store.list_verification_tasks()
        if agent_id:
            rows = [t for t in rows if t.agent_id == agent_id]
        return rows

    @app.get("/api/tasks/{task_id}", response_model=VerificationTask)
    def get_task(task_id: str, store: DomainStore = Depends(get_store)):
        return store.get_verification_task(task_id)

    @app.patch("/api/tasks/{task_id}", response_model=VerificationTask)
    def update_task(task_id: str, body: TaskUpdate, store: DomainStore = Depends(get_store)):
        return store.update_verification_task(task_id, body)

    @app.post("/api/verifications", response_model=schemas.VerificationResult)
    def verify_crop(body: VerificationDecision, store: DomainStore = Depends(get_store)):
        crop, task = store.complete_verification(
            body.crop_id, task_id=body.task_id, decision=body.decision, notes=body.notes
        )
        return schemas.VerificationResult(crop=crop, task=task)

    # ---------- APIs: views ----------
    @app.get("/api/marketplace", response_model=List[Crop])
    def list_marketplace(
        q: Optional[str] = None,
        crop_filter: str = Query("all", alias="filter"),
        store: DomainStore = Depends(get_store),
    ):
        return reports.marketplace(store.list_crops(), q=q, crop_filter=crop_filter)

    @app.get("/api/dashboard/{user_id}")
    def dashboard(user_id: str, store: DomainStore = Depends(get_store)):
        return reports.dashboard_summary(store, user_id)

    @app.get("/api/history", response_model=List[schemas.HistoryEntry])
    def history(store: DomainStore = Depends(get_store)):
        return store.history()

    @app.get("/api/history/verify", response_model=schemas.HistoryCheck)
    def verify_history(store: DomainStore = Depends(get_store)):
        return schemas.HistoryCheck(verified=store.verify_history(), events=len(store.history()))

    return app


app = create_app()
