"""
HTTP boundary for the journal index.
Exposes writing, search, recent listing, entry reads and reconciliation.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request

from .schemas import (
    ThoughtsRequest,
    ThoughtsResponse,
    SearchRequest,
    SearchResultModel,
    SearchResponse,
    EntryResponse,
    ReconcileResponse,
    HealthResponse,
    StoreType,
)
from ..core.config import (
    VERSION,
    RECONCILE_ON_STARTUP,
    RECENT_DEFAULT_DAYS,
    debug_enabled,
    get_embedding_engine,
)
from ..core.errors import ModelInitializationFailure
from ..core.journal import JournalManager
from ..core.search_service import SearchService
from ..vector.types import DateRange, SearchOptions
from util.logging import logger


def _to_response(results) -> SearchResponse:
    models = [SearchResultModel(**result.to_dict()) for result in results]
    return SearchResponse(results=models, count=len(models))


def create_app(search_service: Optional[SearchService] = None,
               journal_manager: Optional[JournalManager] = None,
               reconcile_on_startup: bool = RECONCILE_ON_STARTUP) -> FastAPI:
    """Build the API around one search service and journal manager sharing an engine."""
    search_service = search_service or SearchService(get_embedding_engine())
    journal_manager = journal_manager or JournalManager(
        search_service.project_path,
        search_service.user_path,
        engine=search_service.engine,
        store=search_service.store,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if reconcile_on_startup:
            logger.info("Checking for missing embeddings...")
            try:
                count = await search_service.reconcile_all()
                if count > 0:
                    logger.info(f"Generated embeddings for {count} existing journal entries.")
            except Exception as e:
                # Startup must not fail on a backfill problem
                logger.error(f"Failed to generate missing embeddings on startup: {e}")
        yield

    app = FastAPI(
        title="Private Journal Index API",
        version=VERSION,
        description="Semantic search over project and user journal entries",
        docs_url="/docs" if debug_enabled() else None,
        redoc_url="/redoc" if debug_enabled() else None,
        lifespan=lifespan,
    )
    app.state.search_service = search_service
    app.state.journal_manager = journal_manager

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        service = request.app.state.search_service
        return HealthResponse(
            status="ok",
            version=VERSION,
            project_path=service.project_path,
            user_path=service.user_path,
            model_loaded=service.engine.is_initialized,
        )

    @app.post("/thoughts", response_model=ThoughtsResponse)
    async def write_thoughts(body: ThoughtsRequest, request: Request):
        try:
            paths = await request.app.state.journal_manager.write_thoughts(body.model_dump())
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except OSError as e:
            raise HTTPException(status_code=500, detail=f"Failed to write thoughts: {e}")
        return ThoughtsResponse(success=True, paths=[str(path) for path in paths])

    @app.post("/search", response_model=SearchResponse)
    async def search(body: SearchRequest, request: Request):
        options = SearchOptions(
            limit=body.limit,
            min_score=body.min_score,
            sections=body.sections,
            type=body.type,
        )
        try:
            results = await request.app.state.search_service.search(body.query, options)
        except ModelInitializationFailure as e:
            raise HTTPException(status_code=503, detail=f"Failed to search journal: {e}")
        return _to_response(results)

    @app.get("/entries/recent", response_model=SearchResponse)
    async def list_recent(
        request: Request,
        limit: int = Query(10, ge=1),
        type: StoreType = Query("both"),
        days: int = Query(RECENT_DEFAULT_DAYS, ge=0),
    ):
        options = SearchOptions(
            limit=limit,
            type=type,
            date_range=DateRange(start=datetime.now() - timedelta(days=days)),
        )
        results = await request.app.state.search_service.list_recent(options)
        return _to_response(results)

    @app.get("/entries", response_model=EntryResponse)
    async def read_entry(request: Request, path: str = Query(..., min_length=1)):
        try:
            content = await request.app.state.search_service.read_entry(path)
        except OSError as e:
            raise HTTPException(status_code=400, detail=f"Failed to read entry: {e}")
        if content is None:
            raise HTTPException(status_code=404, detail="Entry not found")
        return EntryResponse(path=path, content=content)

    @app.post("/reconcile", response_model=ReconcileResponse)
    async def reconcile(request: Request):
        created = await request.app.state.search_service.reconcile_all()
        return ReconcileResponse(created=created)

    return app


app = create_app()
