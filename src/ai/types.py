"""
GRC AI Assist - Core types
Request, result and audit record types shared by the dispatcher, normalizer and audit bridge.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


class TaskKind(str, Enum):
    """Call-site categories that decide the normalization policy."""
    FREE_TEXT_INSIGHT = "free_text_insight"
    STRUCTURED_SCORE = "structured_score"
    STRUCTURED_LIST = "structured_list"
    TABULAR_INGESTION = "tabular_ingestion"

    @property
    def expects_structured(self) -> bool:
        return self is not TaskKind.FREE_TEXT_INSIGHT


class FailureReason(str, Enum):
    """Transport failure classes surfaced to feature call sites."""
    ENDPOINT_UNAVAILABLE = "endpoint_unavailable"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class InferenceRequest:
    """A single prompt bound for the inference endpoint."""
    task: TaskKind
    prompt_text: str
    expect_structured: bool
    model_id: str


@dataclass(frozen=True)
class PlainText:
    """Cleaned free-text model output."""
    text: str

    is_degraded = False

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class Structured:
    """JSON value actually parsed from model output."""
    value: Any

    is_degraded = False

    def render(self) -> str:
        return json.dumps(self.value, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class FallbackGuessed:
    """
    Placeholder value manufactured after the model output failed to parse.

    Any score inside ``value`` is a sentinel, never a computed result.
    """
    value: Dict[str, Any]
    raw_text: str

    is_degraded = True

    def render(self) -> str:
        return json.dumps(self.value, indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class Failure:
    """Transport failure rendered as a degraded message in the caller's UI slot."""
    reason: FailureReason
    raw_text: str
    message: str

    is_degraded = True

    def render(self) -> str:
        return self.message


InferenceResult = Union[PlainText, Structured, FallbackGuessed, Failure]


@dataclass(frozen=True)
class UserContext:
    """Authenticated user used to stamp audit entries."""
    user_id: str
    user_name: str


@dataclass(frozen=True)
class AuditEvent:
    """Un-enriched payload published on the audit channel."""
    module: str
    action: str
    prompt_text: str
    response_text: str
    model_id: str


@dataclass(frozen=True)
class AuditLogEntry:
    """Finalized, immutable audit trail record."""
    id: str
    timestamp: str
    user_id: str
    user_name: str
    module: str
    action: str
    prompt_text: str
    response_text: str
    model_id: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "module": self.module,
            "action": self.action,
            "prompt_text": self.prompt_text,
            "response_text": self.response_text,
            "model_id": self.model_id,
        }
