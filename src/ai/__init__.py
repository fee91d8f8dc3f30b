"""
GRC AI Assist - AI response ingestion and normalization layer.
Prompt dispatch to the local model, response normalization, and the AI audit trail bridge.
"""

# Package initialization for ai module
from .types import (
    TaskKind,
    FailureReason,
    InferenceRequest,
    InferenceResult,
    PlainText,
    Structured,
    FallbackGuessed,
    Failure,
    UserContext,
    AuditEvent,
    AuditLogEntry,
)
from .prompts import PromptTemplate, TEMPLATES, get_template
from .dispatcher import PromptDispatcher, InferenceError, EndpointUnavailable, TransportError
from .normalizer import clean_text, safe_json_parse, normalize
from .audit_bridge import AuditChannel, AuditLog, AuditTrailSession
from .service import GRCInsightService, records_from

__all__ = [
    'TaskKind',
    'FailureReason',
    'InferenceRequest',
    'InferenceResult',
    'PlainText',
    'Structured',
    'FallbackGuessed',
    'Failure',
    'UserContext',
    'AuditEvent',
    'AuditLogEntry',
    'PromptTemplate',
    'TEMPLATES',
    'get_template',
    'PromptDispatcher',
    'InferenceError',
    'EndpointUnavailable',
    'TransportError',
    'clean_text',
    'safe_json_parse',
    'normalize',
    'AuditChannel',
    'AuditLog',
    'AuditTrailSession',
    'GRCInsightService',
    'records_from',
]
