"""
GRC AI Assist - Insight Service
Feature-facing call sites: dispatch a templated prompt, normalize the reply and
record one audit event per cycle. Transport failures are returned as degraded
results, never raised to the view layer.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from src.core.config import is_ai_audit_enabled
from util.logging import logger
from .audit_bridge import AuditChannel
from .dispatcher import InferenceError, PromptDispatcher
from .normalizer import failure_result, normalize
from .prompts import TABULAR_SCHEMA_EXAMPLES, get_template
from .types import Failure, InferenceResult

AuditSummary = Callable[[InferenceResult], str]

TABULAR_DATA_LIMIT = 1000
DOCUMENT_DATA_LIMIT = 2000


def records_from(result: InferenceResult) -> List[Any]:
    """Rows produced by an ingestion call; a single object is wrapped, failures yield []."""
    if isinstance(result, Failure):
        return []
    value = getattr(result, "value", None)
    if isinstance(value, list):
        return value
    return [value]


def _audit_text(result: InferenceResult) -> str:
    return result.render()


class GRCInsightService:
    """Runs the dispatch, normalize and audit cycle for each GRC AI feature."""

    def __init__(self, dispatcher: Optional[PromptDispatcher] = None, channel: Optional[AuditChannel] = None):
        self.dispatcher = dispatcher or PromptDispatcher()
        self.channel = channel or AuditChannel()

    async def run(
        self,
        template_name: str,
        context: Mapping[str, Any],
        audit_prompt: Optional[str] = None,
        audit_summary: Optional[AuditSummary] = None,
    ) -> InferenceResult:
        """
        Execute one feature call.

        Args:
            template_name: Name of a registered prompt template
            context: Slot values; not validated
            audit_prompt: Prompt text to record instead of the full prompt
            audit_summary: Produces the response text to record

        Returns:
            PlainText, Structured, FallbackGuessed or Failure
        """
        template = get_template(template_name)
        request = self.dispatcher.build_request(template, context)

        try:
            raw = await self.dispatcher.send(request)
        except InferenceError as e:
            result = failure_result(e, template.label)
        else:
            result = normalize(raw, template.task)

        if is_ai_audit_enabled():
            summarize = audit_summary or _audit_text
            # Audit recording must never break the feature it records
            try:
                response_text = result.render() if isinstance(result, Failure) else summarize(result)
            except Exception as e:
                logger.warning(f"Audit summary failed for {template_name}: {e}")
                response_text = result.render()

            self.channel.publish(
                template.module,
                template.audit_action(context),
                audit_prompt if audit_prompt is not None else request.prompt_text,
                response_text,
                request.model_id,
            )

        return result

    # Free-text features
    async def get_risk_insights(self, risk_data: Any) -> InferenceResult:
        return await self.run("risk_insights", {"risk_data": risk_data})

    async def generate_board_report(self, data: Any) -> InferenceResult:
        return await self.run("board_report", {"data": data})

    async def analyze_regulatory_impact(self, regulation_name: str, summary: str) -> InferenceResult:
        return await self.run("regulatory_impact", {"regulation_name": regulation_name, "summary": summary})

    async def predict_action_risk(self, action_data: Any) -> InferenceResult:
        return await self.run("action_risk", {"action_data": action_data})

    async def generate_policy_sop(self, details: Mapping[str, Any]) -> InferenceResult:
        return await self.run("policy_sop", {
            "doc_type": details.get("type", ""),
            "company_name": details.get("companyName", ""),
            "title": details.get("title", ""),
            "requirements": details.get("requirements", ""),
        })

    async def generate_remediation_content(self, policy_name: str, recommendation: str) -> InferenceResult:
        return await self.run("remediation_content", {"policy_name": policy_name, "recommendation": recommendation})

    async def draft_audit_response(self, audit_title: str, severity: str, department: str) -> InferenceResult:
        return await self.run("audit_response", {
            "audit_title": audit_title,
            "severity": severity,
            "department": department,
        })

    async def analyze_audit_root_cause(self, audit_title: str, severity: str) -> InferenceResult:
        return await self.run("audit_root_cause", {"audit_title": audit_title, "severity": severity})

    async def draft_managed_document(self, prompt: str, context: str, cycle: str) -> InferenceResult:
        return await self.run("managed_document", {"prompt": prompt, "context": context, "cycle": cycle})

    async def edit_document(self, content: str, instruction: str) -> InferenceResult:
        return await self.run("document_edit", {"content": content, "instruction": instruction})

    async def suggest_document_improvements(self, content: str) -> InferenceResult:
        return await self.run("document_improvements", {"content": content})

    async def generate_update_draft(self, content: str, title: str) -> InferenceResult:
        return await self.run("update_draft", {"content": content, "title": title})

    async def analyze_vulnerability(self, title: str, asset_context: str) -> InferenceResult:
        return await self.run("vulnerability_analysis", {"title": title, "asset_context": asset_context})

    async def analyze_incident(self, description: str) -> InferenceResult:
        return await self.run("incident_analysis", {"description": description})

    # Structured features
    async def generate_audit_insights(self, audits: Any) -> InferenceResult:
        return await self.run("audit_insights", {"audits": audits})

    async def analyze_asset_risks(self, asset_data: Any) -> InferenceResult:
        return await self.run("asset_risks", {"asset_data": asset_data})

    async def analyze_asset_health(self, asset: Any, vulnerabilities: List[Any]) -> InferenceResult:
        def summary(result: InferenceResult) -> str:
            value = getattr(result, "value", None)
            score = value.get("healthScore") if isinstance(value, dict) else None
            return f"Score: {score}"

        return await self.run(
            "asset_health",
            {"asset": asset, "vulnerabilities": vulnerabilities},
            audit_prompt="Forensic Scan",
            audit_summary=summary,
        )

    async def analyze_policy_gap(self, policy_name: str, framework: str) -> InferenceResult:
        return await self.run("policy_gap", {"policy_name": policy_name, "framework": framework})

    async def ingest_policy_document(self, data: str) -> InferenceResult:
        return await self.run("policy_document_ingestion", {"data": (data or "")[:DOCUMENT_DATA_LIMIT]})

    async def ingest_tabular_data(self, data: str, target_module: str) -> InferenceResult:
        """Map an uploaded CSV/Excel payload onto a module's record schema."""
        context: Dict[str, Any] = {
            "target_module": target_module,
            "schema_example": TABULAR_SCHEMA_EXAMPLES.get(target_module, ""),
            "data": (data or "")[:TABULAR_DATA_LIMIT],
        }
        return await self.run(
            "tabular_ingestion",
            context,
            audit_prompt="Process File",
            audit_summary=lambda result: f"Mapped {len(records_from(result))} records",
        )
