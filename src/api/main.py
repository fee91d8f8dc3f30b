"""
GRC AI Assist - API application
FastAPI app wiring the insight service, the audit channel and the session audit trail.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .ai import current_user, router as ai_router
from .schemas import HealthResponse
from ..ai.audit_bridge import AuditChannel, AuditLog, AuditTrailSession
from ..ai.dispatcher import PromptDispatcher
from ..ai.service import GRCInsightService
from ..core.config import VERSION, debug_enabled, validate_ai_config
from util.logging import logger


def create_app(dispatcher: Optional[PromptDispatcher] = None) -> FastAPI:
    """Build the API with its own channel, audit log and subscriber session."""
    app = FastAPI(
        title="GRC AI Assist API",
        version=VERSION,
        description="Local-model insights and AI audit trail for the GRC dashboard",
        docs_url="/docs" if debug_enabled() else None,
        redoc_url="/redoc" if debug_enabled() else None,
    )

    # Add CORS middleware to allow frontend connections
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    channel = AuditChannel()
    audit_log = AuditLog()
    session = AuditTrailSession(channel, audit_log, current_user).start()

    app.state.audit_channel = channel
    app.state.audit_log = audit_log
    app.state.audit_session = session
    app.state.insight_service = GRCInsightService(dispatcher or PromptDispatcher(), channel)

    app.include_router(ai_router, prefix="/ai", tags=["ai"])

    @app.get("/health", response_model=HealthResponse)
    def health_check_endpoint(request: Request):
        """Check process health."""
        issues = validate_ai_config()
        return HealthResponse(
            status="healthy" if not issues else "degraded",
            version=VERSION,
            audit_entries=len(request.app.state.audit_log),
            config_issues=issues,
        )

    for issue in validate_ai_config():
        logger.warning(f"AI configuration issue: {issue}")

    return app


app = create_app()
