"""
GRC AI Assist - API schemas
Request and response models for the AI endpoints.
"""

from pydantic import BaseModel, field_validator
from typing import Optional, List, Dict, Any

from ..ai.types import AuditLogEntry, Failure, FallbackGuessed, InferenceResult, PlainText


class RiskAnalysisRequest(BaseModel):
    risk_data: Any


class BoardReportRequest(BaseModel):
    data: Any


class RegulatoryImpactRequest(BaseModel):
    regulation_name: str
    summary: str = ""

    @field_validator('regulation_name')
    @classmethod
    def regulation_name_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('regulation_name cannot be empty')
        return v


class TaskRequest(BaseModel):
    """Free-form slot values for a named prompt template."""
    context: Dict[str, Any] = {}


class AIResultResponse(BaseModel):
    kind: str  # plain_text|structured|fallback|failure
    text: str
    data: Optional[Any] = None
    degraded: bool = False
    failure_reason: Optional[str] = None

    @classmethod
    def from_result(cls, result: InferenceResult) -> "AIResultResponse":
        if isinstance(result, Failure):
            return cls(kind="failure", text=result.render(), degraded=True, failure_reason=result.reason.value)
        if isinstance(result, PlainText):
            return cls(kind="plain_text", text=result.text)
        if isinstance(result, FallbackGuessed):
            return cls(kind="fallback", text=result.raw_text, data=result.value, degraded=True)
        return cls(kind="structured", text=result.render(), data=result.value)


class AuditLogEntryResponse(BaseModel):
    id: str
    timestamp: str
    user_id: str
    user_name: str
    module: str
    action: str
    prompt_text: str
    response_text: str
    model_id: str

    @classmethod
    def from_entry(cls, entry: AuditLogEntry) -> "AuditLogEntryResponse":
        return cls(**entry.to_dict())


class AuditLogListResponse(BaseModel):
    entries: List[AuditLogEntryResponse]
    total: int


class AIHealthResponse(BaseModel):
    status: str  # healthy|degraded|unhealthy
    ollama_url: str
    model: str
    reachable: bool
    model_available: bool
    available_models: List[str] = []
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    audit_entries: int
    config_issues: List[str] = []
