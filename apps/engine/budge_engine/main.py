"""FastAPI application entrypoint for budge."""

from __future__ import annotations

from datetime import date
from typing import Optional

from budge_core import (
    ClassificationPipeline,
    RecordStore,
    Settings,
    StoreConsistencyError,
    append_rule,
    configure_logging,
    get_logger,
    load_accounts,
    load_rules,
    load_settings,
)
from budge_schemas import (
    AccountDefinition,
    Category,
    ClassifiedRecord,
    ProcessRequest,
    ProcessResponse,
    RecordKey,
    RecordListResponse,
    ReprocessRequest,
    ReprocessResponse,
    RuleCreateRequest,
    RuleDefinition,
)
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

router = APIRouter(tags=["engine"])
logger = get_logger("budge.engine")


def _store(request: Request) -> RecordStore:
    return request.app.state.store


def _pipeline(request: Request) -> ClassificationPipeline:
    return request.app.state.pipeline


def _rebuild_pipeline(request: Request) -> None:
    request.app.state.pipeline = ClassificationPipeline.from_settings(
        _store(request), request.app.state.settings
    )


@router.post("/process", response_model=ProcessResponse)
def process_files(payload: ProcessRequest, request: Request) -> ProcessResponse:
    """Ingest statement files and commit their records as one batch."""
    store = _store(request)
    before = len(store)
    try:
        error = _pipeline(request).process(payload.files)
    except StoreConsistencyError as exc:  # pragma: no cover - defensive branch
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ProcessResponse(committed=len(store) - before, error=error)


@router.post("/reprocess", response_model=ReprocessResponse)
def reprocess_records(
    request: Request, payload: ReprocessRequest | None = None
) -> ReprocessResponse:
    """Retry rules against unclassified records."""
    store = _store(request)
    candidates = store.unclassified()
    if payload is not None and payload.keys is not None:
        wanted = set(payload.keys)
        candidates = [record for record in candidates if record.key in wanted]
    try:
        count = _pipeline(request).reprocess(candidates)
    except StoreConsistencyError as exc:  # pragma: no cover - defensive branch
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return ReprocessResponse(candidates=len(candidates), reprocessed=count)


@router.get("/records", response_model=RecordListResponse)
def list_records(
    request: Request,
    account: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    description: Optional[str] = None,
    classified: Optional[bool] = None,
    category: Optional[Category] = None,
) -> RecordListResponse:
    store = _store(request)
    records = store.filter(
        account=account,
        date_from=date_from,
        date_to=date_to,
        description=description,
        classified=classified,
        category=category,
    )
    return RecordListResponse(records=records, summary=store.summary())


@router.get("/records/{key}", response_model=ClassifiedRecord)
def get_record(key: RecordKey, request: Request) -> ClassifiedRecord:
    try:
        return _store(request).get(key)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/rules", response_model=list[RuleDefinition])
def list_rules() -> list[RuleDefinition]:
    return load_rules()


@router.post("/rules", response_model=list[RuleDefinition])
def create_rule(payload: RuleCreateRequest, request: Request) -> list[RuleDefinition]:
    rule = RuleDefinition(**payload.model_dump())
    rules = append_rule(rule)
    # Later reprocess calls must see the new rule.
    _rebuild_pipeline(request)
    return rules


@router.get("/accounts", response_model=list[AccountDefinition])
def list_accounts() -> list[AccountDefinition]:
    return load_accounts()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Each app owns its own ``RecordStore``; the store lives as long as the app.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="budge Engine", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = RecordStore()
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = ClassificationPipeline.from_settings(store, settings)

    @app.get("/health", tags=["system"])  # pragma: no cover - trivial
    def healthcheck() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(router)
    logger.info("Engine ready with %d rules", len(load_rules()))

    return app


app = create_app()


def run() -> None:  # pragma: no cover - manual entrypoint
    """Run the development server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "budge_engine.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":  # pragma: no cover - manual entrypoint
    run()
