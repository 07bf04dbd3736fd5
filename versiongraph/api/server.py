"""
Version Graph Engine: API Server
================================

HTTP boundary between the host UI and the engine.

Endpoints:
- GET    /api/v1/history                  -> Entries in insertion order
- POST   /api/v1/history                  -> Record an entry
- GET    /api/v1/graph                    -> Latest snapshot + selection
- PUT    /api/v1/filter                   -> Set search term / action filter
- DELETE /api/v1/filter                   -> Clear filters
- GET    /api/v1/selection                -> Selection state
- POST   /api/v1/selection/click          -> Node click
- POST   /api/v1/selection/merge-mode     -> Toggle merge mode
- DELETE /api/v1/selection/merge-mode     -> Cancel merge mode
- POST   /api/v1/merge                    -> Confirm merge
- POST   /api/v1/versions/{id}/load       -> Load a version into the editor
- GET    /api/v1/audit                    -> Audit report

Usage:
    uvicorn versiongraph.api.server:app --reload
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..contracts.base import LineageInvariantError
from ..engine import EngineConfig, VersionGraphEngine
from ..fixtures import rubric_history_seed
from ..graph.builder import DisplayConfig
from .mapper import map_entry, map_error, map_selection, map_snapshot, map_version
from .schemas import FilterBody, HistoryEntryBody, MergeBody, NodeClickBody

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

# Global Engine Instance
engine_instance: Optional[VersionGraphEngine] = None


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the engine on startup."""
    global engine_instance

    seed_demo = _env_flag("VG_SEED_DEMO", True)
    criteria_name = os.environ.get("VG_CRITERIA_NAME", DisplayConfig.criteria_name)

    print(f"[*] Initializing Version Graph Engine (seed_demo={seed_demo})")

    config = EngineConfig(display=DisplayConfig(criteria_name=criteria_name))
    engine_instance = VersionGraphEngine(
        config,
        history=rubric_history_seed() if seed_demo else None,
    )
    print(f"[*] Engine ready with {len(engine_instance.history)} history entries.")

    yield

    print("[*] Shutting down engine.")
    engine_instance = None


app = FastAPI(
    title="Version Graph Engine API",
    version="0.1.0",
    description="Lineage graph, filtering, selection and merge for rubric history",
    lifespan=lifespan
)

# CORS (Allow Frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


def _engine() -> VersionGraphEngine:
    if not engine_instance:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine_instance


def _graph_payload(engine: VersionGraphEngine) -> dict:
    return map_snapshot(engine.snapshot, engine.selection)


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    """System status."""
    engine = _engine()
    return {"status": "online", "entries": len(engine.history)}


@app.get("/api/v1/history")
async def get_history():
    """All entries, insertion order."""
    engine = _engine()
    return {"entries": [map_entry(e) for e in engine.history]}


@app.post("/api/v1/history", status_code=201)
async def record_event(body: HistoryEntryBody):
    """
    Append an entry recorded by the rubric editor.
    Duplicate or reserved ids and unknown parents are rejected with 422.
    """
    engine = _engine()
    try:
        entry = engine.record_event(body.to_input())
    except LineageInvariantError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"entry": map_entry(entry), "graph": _graph_payload(engine)}


@app.get("/api/v1/graph")
async def get_graph():
    """Latest snapshot with selection state."""
    return _graph_payload(_engine())


@app.put("/api/v1/filter")
async def set_filter(body: FilterBody):
    engine = _engine()
    try:
        engine.set_filter(search_term=body.search_term, action_filter=body.action_filter)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "filter": {
            "searchTerm": engine.criteria.search_term,
            "actionFilter": engine.criteria.action_value,
        },
        "graph": _graph_payload(engine),
    }


@app.delete("/api/v1/filter")
async def clear_filters():
    engine = _engine()
    engine.clear_filters()
    return _graph_payload(engine)


@app.get("/api/v1/selection")
async def get_selection():
    return map_selection(_engine().selection)


@app.post("/api/v1/selection/click")
async def click_node(body: NodeClickBody):
    engine = _engine()
    try:
        engine.select_node(body.node_id, body.modifier_held)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown node {body.node_id}")
    return _graph_payload(engine)


@app.post("/api/v1/selection/merge-mode")
async def toggle_merge_mode():
    engine = _engine()
    engine.toggle_merge_mode()
    return map_selection(engine.selection)


@app.delete("/api/v1/selection/merge-mode")
async def cancel_merge_mode():
    engine = _engine()
    engine.cancel_merge()
    return map_selection(engine.selection)


@app.post("/api/v1/merge")
async def merge(body: Optional[MergeBody] = Body(default=None)):
    """
    Merge explicit ids, or the current merge candidates when no ids are sent.
    Validation failures return 400 and change nothing.
    """
    engine = _engine()
    if body is not None and body.ids is not None:
        result = engine.request_merge(body.ids)
    else:
        result = engine.confirm_merge()

    if result.is_failure:
        raise HTTPException(status_code=400, detail=map_error(result.error))

    return {"entry": map_entry(result.value), "graph": _graph_payload(engine)}


@app.post("/api/v1/versions/{entry_id}/load")
async def load_version(entry_id: str):
    engine = _engine()
    try:
        version = engine.load_version(entry_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown version {entry_id}")
    return map_version(version)


@app.get("/api/v1/audit")
async def audit_report():
    return _engine().observability.generate_audit_report()
