"""FastAPI application for complyscope."""

import logging
from functools import lru_cache
from typing import List, Dict, Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from complyscope import __version__
from complyscope.coordinator import ScopeCoordinator, WorkspaceFileMissing, configure_logging, get_config
from complyscope.models.oscal import AssessmentPlan, ComponentDefinition
from complyscope.models.scope import AssessmentScope
from complyscope.scope import EmptyInputError, apply_scope, build_scope, list_skipped
from complyscope.utils.documents import DocumentLoadError, NoComponentDefinitionsFound

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="complyscope",
    description="Assessment scope resolution and assessment plan filtering",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def setup_logging() -> None:
    """Configure logging on startup."""
    configure_logging(get_config().debug)


@lru_cache()
def get_coordinator() -> ScopeCoordinator:
    """Coordinator for the configured workspace."""
    return ScopeCoordinator(get_config())


# Request/Response models
class BuildScopeRequest(BaseModel):
    """Request to build a scope from component definitions."""

    framework_id: str
    component_definitions: List[Dict[str, Any]] = Field(default_factory=list)


class ApplyScopeRequest(BaseModel):
    """Request to narrow an assessment plan to a scope."""

    scope: AssessmentScope
    assessment_plan: Dict[str, Any]


class PlanRequest(BaseModel):
    """Request to build and persist the workspace scope."""

    framework_id: str


def _unwrap(document: Dict[str, Any], root_key: str) -> Dict[str, Any]:
    return document.get(root_key, document)


# API Endpoints
@app.get("/")
async def root():
    """Service info."""
    return {
        "service": "complyscope",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/api/v1/scope/build")
async def build_scope_endpoint(request: BuildScopeRequest):
    """Build a scope from the posted component definitions."""
    try:
        component_definitions = [
            ComponentDefinition.model_validate(_unwrap(cd, "component-definition"))
            for cd in request.component_definitions
        ]
        scope = build_scope(request.framework_id, *component_definitions)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid component definition: {exc}")
    except EmptyInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return scope.to_descriptor()


@app.post("/api/v1/scope/apply")
async def apply_scope_endpoint(request: ApplyScopeRequest):
    """Narrow the posted assessment plan to the posted scope."""
    try:
        plan = AssessmentPlan.model_validate(_unwrap(request.assessment_plan, "assessment-plan"))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid assessment plan: {exc}")

    apply_scope(request.scope, plan, logger=logger)
    return {
        "assessment_plan": {"assessment-plan": plan.to_dict()},
        "skipped": list_skipped(plan),
    }


@app.post("/api/v1/plan")
async def plan(
    request: PlanRequest, coordinator: ScopeCoordinator = Depends(get_coordinator)
):
    """Build the workspace scope from the bundled component definitions."""
    try:
        scope = await coordinator.plan(request.framework_id)
    except NoComponentDefinitionsFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except DocumentLoadError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return scope.to_descriptor()


@app.get("/api/v1/scope")
async def get_scope(coordinator: ScopeCoordinator = Depends(get_coordinator)):
    """Get the workspace scope descriptor."""
    try:
        scope = await coordinator.storage.load_scope()
    except (DocumentLoadError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid scope file: {exc}")
    if scope is None:
        raise HTTPException(status_code=404, detail="Scope not found, run plan first")
    return scope.to_descriptor()


@app.put("/api/v1/scope")
async def put_scope(
    scope: AssessmentScope, coordinator: ScopeCoordinator = Depends(get_coordinator)
):
    """Replace the workspace scope descriptor."""
    await coordinator.storage.save_scope(scope)
    return scope.to_descriptor()


@app.post("/api/v1/generate")
async def generate(coordinator: ScopeCoordinator = Depends(get_coordinator)):
    """Narrow the workspace plan template to the workspace scope."""
    try:
        return await coordinator.generate()
    except WorkspaceFileMissing as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (DocumentLoadError, ValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
