"""
GRC AI Assist - AI audit trail viewer
Search, filtering and summaries over AI audit trail entries served by the API.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from src.ai.types import AuditLogEntry
from util.logging import logger

PREVIEW_LENGTH = 80


@dataclass
class AuditSearchCriteria:
    """Search criteria for AI audit trail filtering."""
    search_text: Optional[str] = None
    module: Optional[str] = None
    user: Optional[str] = None
    model: Optional[str] = None
    limit: int = 50
    offset: int = 0


@dataclass
class AuditRow:
    """AI audit entry prepared for table display."""
    id: str
    timestamp: str
    user_name: str
    module: str
    action: str
    model_id: str
    prompt_preview: str
    response_preview: str
    initials: str


def _preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    flat = " ".join((text or "").split())
    return flat[:length - 3] + "..." if len(flat) > length else flat


def _initials(name: str) -> str:
    return "".join(part[0] for part in (name or "").split() if part).upper()


class AuditLogViewer:
    """Audit trail viewer over a newest-first sequence of entries."""

    def __init__(self, api_url: str = "http://localhost:8000", timeout: float = 5.0):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._max_results = 1000  # Upper bound accepted by the API

    def fetch_entries(self) -> List[AuditLogEntry]:
        """Load the current AI audit trail from the API, newest first."""
        try:
            response = httpx.get(
                f"{self.api_url}/ai/audit-logs",
                params={"limit": self._max_results},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return [AuditLogEntry(**item) for item in response.json().get("entries", [])]
        except httpx.HTTPError as e:
            logger.error(f"AI audit trail fetch failed: {e}")
        except (ValueError, TypeError, AttributeError) as e:
            # Non-JSON body or unexpected entry shape
            logger.error(f"AI audit trail response unreadable: {e}")
        return []

    def search_entries(
        self, entries: Sequence[AuditLogEntry], criteria: AuditSearchCriteria
    ) -> Tuple[List[AuditRow], int]:
        """
        Filter entries against the criteria.

        Returns:
            Tuple of (page_of_rows, total_matching)
        """
        filtered = self._apply_search_criteria(entries, criteria)
        page = filtered[criteria.offset:criteria.offset + criteria.limit]
        return [self.to_row(entry) for entry in page], len(filtered)

    def get_audit_summary(self, entries: Sequence[AuditLogEntry]) -> Dict[str, Any]:
        """Counts per module, model and user."""
        modules: Dict[str, int] = {}
        models: Dict[str, int] = {}
        users: Dict[str, int] = {}

        for entry in entries:
            modules[entry.module] = modules.get(entry.module, 0) + 1
            models[entry.model_id] = models.get(entry.model_id, 0) + 1
            users[entry.user_name] = users.get(entry.user_name, 0) + 1

        return {
            "total_entries": len(entries),
            "modules": dict(sorted(modules.items(), key=lambda x: x[1], reverse=True)),
            "models": dict(sorted(models.items(), key=lambda x: x[1], reverse=True)),
            "top_users": dict(list(sorted(users.items(), key=lambda x: x[1], reverse=True))[:10]),
            "degraded_responses": sum(1 for e in entries if " unavailable: " in e.response_text),
        }

    def to_row(self, entry: AuditLogEntry) -> AuditRow:
        return AuditRow(
            id=entry.id,
            timestamp=entry.timestamp,
            user_name=entry.user_name,
            module=entry.module,
            action=entry.action,
            model_id=entry.model_id,
            prompt_preview=_preview(entry.prompt_text),
            response_preview=_preview(entry.response_text),
            initials=_initials(entry.user_name),
        )

    def _apply_search_criteria(
        self, entries: Iterable[AuditLogEntry], criteria: AuditSearchCriteria
    ) -> List[AuditLogEntry]:
        """Apply search criteria; order of the input is preserved."""
        filtered = list(entries)

        if criteria.module:
            module = criteria.module.lower()
            filtered = [e for e in filtered if module in e.module.lower()]

        if criteria.user:
            user = criteria.user.lower()
            filtered = [e for e in filtered if user in e.user_name.lower() or user == e.user_id.lower()]

        if criteria.model:
            filtered = [e for e in filtered if criteria.model.lower() in e.model_id.lower()]

        # Same fields the dashboard filter box matches
        if criteria.search_text:
            search_lower = criteria.search_text.lower()
            filtered = [e for e in filtered if
                        search_lower in e.user_name.lower() or
                        search_lower in e.module.lower() or
                        search_lower in e.action.lower()]

        return filtered


def search_audit_entries(
    entries: Sequence[AuditLogEntry], criteria: AuditSearchCriteria
) -> Tuple[List[AuditRow], int]:
    """Search AI audit entries."""
    return AuditLogViewer().search_entries(entries, criteria)


def get_audit_summary(entries: Sequence[AuditLogEntry]) -> Dict[str, Any]:
    """Get AI audit summary statistics."""
    return AuditLogViewer().get_audit_summary(entries)
