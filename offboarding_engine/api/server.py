"""
FastAPI Server for the Offboarding Engine.

Provides REST API endpoints for starting offboarding processes, saving and
completing steps, navigating between steps, cancelling, and reading the
audit trail.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import (
    ActiveProcessExistsError,
    OffboardingError,
    PersistenceError,
    ProcessClosedError,
    ProcessNotFoundError,
    StepValidationError,
)
from ..models import OffboardingProcess
from ..workflows import STEPS, OffboardingEngine, create_process_summary

logger = logging.getLogger(__name__)


# Pydantic models for API requests/responses
class StartProcessRequest(BaseModel):
    """Offboarding start request."""
    actor: Optional[str] = Field(None, description="User starting the process")
    department: Optional[str] = Field(None, description="Department used to pick default checklists")


class StepSubmissionRequest(BaseModel):
    """Step save/completion request."""
    payload: Dict[str, Any] = Field(default_factory=dict, description="New field values for the step")
    complete: bool = Field(False, description="Mark the step complete (validated) or just save")
    actor: Optional[str] = Field(None, description="User making the submission")


class NavigateRequest(BaseModel):
    """Step navigation request."""
    step: int = Field(..., description="Step to open (1-9)")
    actor: Optional[str] = None


class CancelRequest(BaseModel):
    """Process cancellation request."""
    actor: Optional[str] = None


class ProcessResponse(BaseModel):
    """Offboarding process response."""
    process: Dict[str, Any]
    summary: Dict[str, Any]


class AuditResponse(BaseModel):
    """Audit record response."""
    id: str
    timestamp: str
    event_type: str
    employee_id: str
    process_id: str
    step_index: Optional[int]
    action: str
    success: bool
    error_message: Optional[str]
    actor: Optional[str]


# Engine configuration and instance (initialized on startup)
server_config: Dict[str, Any] = {}
engine: Optional[OffboardingEngine] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global engine

    logger.info("Initializing Offboarding Engine API server components")
    engine = OffboardingEngine(server_config)
    logger.info("Offboarding Engine API server components initialized")

    yield

    logger.info("Shutting down Offboarding Engine API server")


app = FastAPI(
    title="Offboarding Engine API",
    description="Employee offboarding workflow engine - REST API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_engine() -> OffboardingEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Offboarding engine not available")
    return engine


def _to_response(process: OffboardingProcess) -> ProcessResponse:
    return ProcessResponse(
        process=process.model_dump(mode="json"),
        summary=create_process_summary(process),
    )


def _to_http_error(e: Exception) -> HTTPException:
    """Map engine errors to HTTP errors."""
    if isinstance(e, StepValidationError):
        return HTTPException(
            status_code=400,
            detail={"message": str(e), "step": e.step_index, "errors": e.errors},
        )
    if isinstance(e, ProcessNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, (ActiveProcessExistsError, ProcessClosedError)):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, PersistenceError):
        return HTTPException(status_code=500, detail="Failed to save offboarding process")
    return HTTPException(status_code=500, detail=str(e))


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Offboarding Engine API", "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    components = {
        "engine": engine is not None,
        "state_manager": engine is not None and engine.state_manager is not None,
        "audit_logger": engine is not None and engine.audit_logger is not None,
        "attachment_store": engine is not None and engine.attachment_store is not None,
    }
    return {
        "status": "healthy" if all(components.values()) else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": components,
    }


@app.get("/steps")
async def list_steps():
    """The offboarding step sequence."""
    return [step.to_dict() for step in STEPS]


@app.post("/employees/{employee_id}/offboarding", response_model=ProcessResponse, status_code=201)
async def start_process(employee_id: str, request: Optional[StartProcessRequest] = None):
    """Start offboarding an employee."""
    eng = _get_engine()
    request = request or StartProcessRequest()

    try:
        process = eng.start_process(employee_id, actor=request.actor, department=request.department)
    except (OffboardingError, ValueError) as e:
        logger.error(f"Error starting offboarding for {employee_id}: {e}")
        raise _to_http_error(e) from e

    return _to_response(process)


@app.get("/employees/{employee_id}/offboarding", response_model=ProcessResponse)
async def get_active_process(employee_id: str):
    """Get the employee's active offboarding process."""
    eng = _get_engine()

    process = eng.get_active_process(employee_id)
    if not process:
        raise HTTPException(status_code=404, detail=f"No active offboarding process for {employee_id}")

    return _to_response(process)


@app.get("/processes/{process_id}", response_model=ProcessResponse)
async def get_process(process_id: str):
    """Get an offboarding process by ID."""
    eng = _get_engine()

    try:
        process = eng.get_process(process_id)
    except ProcessNotFoundError as e:
        raise _to_http_error(e) from e

    return _to_response(process)


@app.put("/processes/{process_id}/steps/{step_index}", response_model=ProcessResponse)
async def submit_step(process_id: str, step_index: int, request: StepSubmissionRequest):
    """
    Save or complete a step.

    A completing submission that fails the step's precondition returns 400
    with the list of missing preconditions, and nothing is written.
    """
    eng = _get_engine()

    try:
        process = eng.submit_step(
            process_id,
            step_index,
            request.payload,
            complete=request.complete,
            actor=request.actor,
        )
    except StepValidationError as e:
        raise _to_http_error(e) from e
    except (OffboardingError, ValueError) as e:
        logger.error(f"Error submitting step {step_index} for process {process_id}: {e}")
        raise _to_http_error(e) from e

    return _to_response(process)


@app.post("/processes/{process_id}/navigate", response_model=ProcessResponse)
async def navigate(process_id: str, request: NavigateRequest):
    """Open any step of the process."""
    eng = _get_engine()

    try:
        process = eng.navigate_to(process_id, request.step, actor=request.actor)
    except (OffboardingError, ValueError) as e:
        raise _to_http_error(e) from e

    return _to_response(process)


@app.post("/processes/{process_id}/cancel", response_model=ProcessResponse)
async def cancel(process_id: str, request: Optional[CancelRequest] = None):
    """Cancel an active process."""
    eng = _get_engine()
    request = request or CancelRequest()

    try:
        process = eng.cancel_process(process_id, actor=request.actor)
    except (OffboardingError, ValueError) as e:
        raise _to_http_error(e) from e

    return _to_response(process)


@app.get("/processes/{process_id}/audit", response_model=List[AuditResponse])
async def get_audit_trail(
    process_id: str,
    limit: int = Query(100, description="Maximum number of results"),
):
    """Audit trail of a process, most recent first."""
    eng = _get_engine()

    records = eng.audit_logger.get_events(process_id=process_id, limit=limit)
    return [
        AuditResponse(
            id=r.id,
            timestamp=r.timestamp.isoformat(),
            event_type=r.event_type,
            employee_id=r.employee_id,
            process_id=r.process_id,
            step_index=r.step_index,
            action=r.action,
            success=r.success,
            error_message=r.error_message,
            actor=r.actor,
        )
        for r in records
    ]


@app.get("/stats")
async def get_system_stats():
    """Get process statistics."""
    eng = _get_engine()

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "processes": eng.state_manager.get_summary(),
    }


def start_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
    config: Optional[Dict[str, Any]] = None,
):
    """Start the FastAPI server."""
    if config:
        server_config.update(config)

    uvicorn.run(
        "offboarding_engine.api.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    start_server()
