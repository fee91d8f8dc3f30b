"""
GRC AI Assist - AI API
Endpoints for the AI features and the AI audit trail.

Every AI endpoint answers 200 with a degraded result when the model is
unavailable; only malformed requests produce HTTP errors.
"""

from contextvars import ContextVar
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from .schemas import (
    AIHealthResponse,
    AIResultResponse,
    AuditLogEntryResponse,
    AuditLogListResponse,
    BoardReportRequest,
    RegulatoryImpactRequest,
    RiskAnalysisRequest,
    TaskRequest,
)
from ..ai.audit_bridge import AuditLog
from ..ai.prompts import TEMPLATES
from ..ai.service import GRCInsightService
from ..ai.types import UserContext

router = APIRouter()

# Authenticated user of the request being served
_current_user: ContextVar[Optional[UserContext]] = ContextVar("current_user", default=None)


def current_user() -> Optional[UserContext]:
    """User provider for the audit trail session."""
    return _current_user.get()


async def bind_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
) -> Optional[UserContext]:
    """
    Bind the caller's identity to the request context.

    Async so the context variable is set in the task that runs the endpoint.
    """
    if not x_user_id:
        _current_user.set(None)
        return None

    user = UserContext(user_id=x_user_id, user_name=x_user_name or x_user_id)
    _current_user.set(user)
    return user


def get_service(request: Request) -> GRCInsightService:
    return request.app.state.insight_service


def get_audit_log(request: Request) -> AuditLog:
    return request.app.state.audit_log


@router.post("/analyze-risk", response_model=AIResultResponse)
async def analyze_risk(
    body: RiskAnalysisRequest,
    user: Optional[UserContext] = Depends(bind_user),
    service: GRCInsightService = Depends(get_service),
) -> AIResultResponse:
    """Board-level insights for a set of risks."""
    result = await service.get_risk_insights(body.risk_data)
    return AIResultResponse.from_result(result)


@router.post("/generate-board-report", response_model=AIResultResponse)
async def generate_board_report(
    body: BoardReportRequest,
    user: Optional[UserContext] = Depends(bind_user),
    service: GRCInsightService = Depends(get_service),
) -> AIResultResponse:
    result = await service.generate_board_report(body.data)
    return AIResultResponse.from_result(result)


@router.post("/analyze-regulatory-impact", response_model=AIResultResponse)
async def analyze_regulatory_impact(
    body: RegulatoryImpactRequest,
    user: Optional[UserContext] = Depends(bind_user),
    service: GRCInsightService = Depends(get_service),
) -> AIResultResponse:
    result = await service.analyze_regulatory_impact(body.regulation_name, body.summary)
    return AIResultResponse.from_result(result)


@router.post("/tasks/{template_name}", response_model=AIResultResponse)
async def run_task(
    template_name: str,
    body: TaskRequest,
    user: Optional[UserContext] = Depends(bind_user),
    service: GRCInsightService = Depends(get_service),
) -> AIResultResponse:
    """Run any registered prompt template with caller-supplied slot values."""
    if template_name not in TEMPLATES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown AI task: {template_name}",
        )

    result = await service.run(template_name, body.context)
    return AIResultResponse.from_result(result)


@router.get("/audit-logs", response_model=AuditLogListResponse)
def list_audit_logs(
    search: str = "",
    limit: int = Query(default=100, ge=1, le=1000),
    audit_log: AuditLog = Depends(get_audit_log),
) -> AuditLogListResponse:
    """AI audit trail, newest first."""
    entries = audit_log.search(search) if search else audit_log.entries()
    return AuditLogListResponse(
        entries=[AuditLogEntryResponse.from_entry(entry) for entry in entries[:limit]],
        total=len(entries),
    )


@router.get("/health", response_model=AIHealthResponse)
async def ai_health(service: GRCInsightService = Depends(get_service)) -> AIHealthResponse:
    """Reachability of the inference endpoint and availability of the configured model."""
    health = await service.dispatcher.check_health()

    if health.reachable and health.model_available:
        overall_status = "healthy"
    elif health.reachable:
        overall_status = "degraded"
    else:
        overall_status = "unhealthy"

    return AIHealthResponse(
        status=overall_status,
        ollama_url=service.dispatcher.settings.base_url,
        model=health.model,
        reachable=health.reachable,
        model_available=health.model_available,
        available_models=health.available_models,
        error=health.error,
    )
