"""
GRC AI Assist - Prompt templates
Named-slot templates for every AI feature of the GRC dashboard.

Interpolation performs no validation of caller-supplied context: a missing slot
stays in the prompt as ``$slot`` and odd values are rendered as-is. A malformed
context yields a malformed prompt, never an error.
"""

import json
import string
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from .types import TaskKind

NO_MARKDOWN_INSTRUCTION = (
    "IMPORTANT: Do NOT use markdown symbols like ###, ##, **, or * for formatting. "
    "Use plain text only. Use ALL CAPS for section headers. Use simple bullet points (•) for lists. "
    "Do not use markdown tables; use structured plain text instead."
)

JSON_ONLY_INSTRUCTION = "Please respond with valid JSON only."

TABULAR_SCHEMA_EXAMPLES = {
    "Risk": 'Example: [{"title": "Data Breach Risk", "description": "Risk of unauthorized access", "impact": 4, "likelihood": 3, "owner": "IT Security", "status": "Open"}]',
    "Audit": 'Example: [{"title": "Access Control Review", "severity": "High", "department": "IT", "dueDate": "2024-12-31", "completionStatus": 75}]',
    "User": 'Example: [{"name": "John Doe", "email": "john@company.com", "role": "Risk Manager", "status": "Active"}]',
    "Asset": 'Example: [{"name": "Web Server", "manufacturer": "Dell", "type": "Server", "serialNumber": "SN123", "value": 5000, "riskLevel": "High", "responsibleTeam": "IT"}]',
    "Policy": 'Example: [{"name": "Data Protection Policy", "type": "Policy", "category": "Security", "reviewCycle": "1 Year", "complianceScore": 85, "status": "Active"}]',
    "Regulation": "",
}


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


@dataclass(frozen=True)
class PromptTemplate:
    """A feature prompt with named ``$slot`` placeholders."""
    name: str
    task: TaskKind
    module: str
    action: str
    label: str
    text: str

    @property
    def expect_structured(self) -> bool:
        return self.task.expects_structured

    @property
    def slots(self) -> List[str]:
        """Slot names in order of first appearance."""
        names = []
        for match in string.Template.pattern.finditer(self.text):
            name = match.group("named") or match.group("braced")
            if name and name not in names:
                names.append(name)
        return names

    def interpolate(self, context: Mapping[str, Any]) -> str:
        """Fill slots from ``context``; unknown keys are ignored, missing slots left as-is."""
        values = {key: _render_value(value) for key, value in (context or {}).items()}
        return string.Template(self.text).safe_substitute(values)

    def audit_action(self, context: Mapping[str, Any]) -> str:
        """Action name recorded in the audit trail; may itself carry slots."""
        values = {key: _render_value(value) for key, value in (context or {}).items()}
        return string.Template(self.action).safe_substitute(values)


_TEMPLATES = [
    PromptTemplate(
        name="risk_insights",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Risk Register",
        action="Strategic Insights",
        label="Risk analysis",
        text=f"Analyze the following risk data and provide 3 key insights for the Board: $risk_data. {NO_MARKDOWN_INSTRUCTION}",
    ),
    PromptTemplate(
        name="board_report",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Reporting",
        action="Board Summary Generation",
        label="Board report generation",
        text=(
            "As an AI Risk Analyst, write a professional Board Executive Summary based on this GRC data: $data. "
            f"Use a formal, strategic tone. {NO_MARKDOWN_INSTRUCTION}"
        ),
    ),
    PromptTemplate(
        name="regulatory_impact",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Regulatory Monitoring",
        action="Impact Assessment",
        label="Regulatory analysis",
        text=(
            'Perform a high-level Regulatory Impact Assessment for "$regulation_name". Summary: $summary.\n'
            "Identify:\n"
            "1. Key Obligations\n"
            "2. Potential Business Risks\n"
            "3. Suggested Internal Control Updates.\n"
            f"{NO_MARKDOWN_INSTRUCTION}"
        ),
    ),
    PromptTemplate(
        name="action_risk",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Action Tracking",
        action="Predictive Success Analysis",
        label="Action risk prediction",
        text=(
            "Analyze the following GRC action items and predict completion probability.\n"
            "Data: $action_data.\n"
            "Provide:\n"
            "1. INDIVIDUAL PREDICTIONS\n"
            "2. BOTTLENECK ANALYSIS\n"
            "3. MITIGATION STRATEGY\n"
            f"{NO_MARKDOWN_INSTRUCTION}"
        ),
    ),
    PromptTemplate(
        name="policy_sop",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Policy Intelligence",
        action="Policy Generation",
        label="Policy generation",
        text=f'Create enterprise $doc_type for "$company_name". Title: "$title". Requirements: $requirements. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="remediation_content",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Policy Intelligence",
        action="Remediation Drafting",
        label="Remediation content generation",
        text=f'Write POLICY CLAUSE and IMPLEMENTATION STEPS for gap in "$policy_name": "$recommendation". {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="audit_response",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Audit Co-Pilot",
        action="Management Response Draft",
        label="Audit response drafting",
        text=f'Draft management response for audit: "$audit_title". Severity: $severity. Dept: $department. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="audit_root_cause",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Audit Co-Pilot",
        action="Root Cause Analysis",
        label="Root cause analysis",
        text=f'Perform 5-Why RCA for: "$audit_title". Severity: $severity. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="audit_insights",
        task=TaskKind.STRUCTURED_SCORE,
        module="Audit Co-Pilot",
        action="Assurance Maturity Analysis",
        label="Audit insights",
        text=(
            "Analyze these audit findings and provide assurance maturity score (0-100), trend, and top risks. $audits\n\n"
            'Return JSON: {"maturityScore": number, "maturityTrend": "string", "topRisks": [{"title": "string", "description": "string"}]}'
        ),
    ),
    PromptTemplate(
        name="managed_document",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Document Management",
        action="Document Drafting",
        label="Document drafting",
        text=f'Draft formal document: "$prompt". Context: $context. Cycle: $cycle. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="document_edit",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Document Management",
        action="AI Edit",
        label="Document editing",
        text=f'Refine content based on: "$instruction". Content: $content. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="document_improvements",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Document Management",
        action="Improvement Suggestions",
        label="Document improvement suggestions",
        text=f"Suggest compliance improvements for: $content. {NO_MARKDOWN_INSTRUCTION}",
    ),
    PromptTemplate(
        name="update_draft",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Document Management",
        action="Update Draft",
        label="Update draft generation",
        text=f'Modernize draft for "$title": $content. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="vulnerability_analysis",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Vulnerability Management",
        action="Vulnerability Analysis",
        label="Vulnerability analysis",
        text=f'Analyze vulnerability "$title" for assets: $asset_context. {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="incident_analysis",
        task=TaskKind.FREE_TEXT_INSIGHT,
        module="Incident Management",
        action="Crisis Analysis",
        label="Incident analysis",
        text=f'Crisis analysis for incident: "$description". {NO_MARKDOWN_INSTRUCTION}',
    ),
    PromptTemplate(
        name="tabular_ingestion",
        task=TaskKind.TABULAR_INGESTION,
        module="Bulk Ingestion",
        action="$target_module Import",
        label="Data ingestion",
        text=(
            "Analyze the following data and convert it to the $target_module module format.\n"
            "Map the columns intelligently even if names don't match exactly.\n"
            "$schema_example\n\n"
            "Data to analyze: $data... (truncated for processing)\n\n"
            "Return only a valid JSON array of objects matching the schema."
        ),
    ),
    PromptTemplate(
        name="policy_document_ingestion",
        task=TaskKind.STRUCTURED_SCORE,
        module="Policy Intelligence",
        action="Document Ingestion",
        label="Document analysis",
        text=(
            "Analyze the attached document content and extract: title, type (Policy/SOP), category, "
            "content summary, compliance score (0-100), and review cycle.\n\n"
            "Document content: $data... (truncated)\n\n"
            'Return as JSON: {"name": "string", "type": "Policy|SOP", "category": "string", "content": "string", '
            '"complianceScore": number, "reviewCycle": "6 Months|1 Year|2 Years|3 Years"}'
        ),
    ),
    PromptTemplate(
        name="asset_risks",
        task=TaskKind.STRUCTURED_SCORE,
        module="Asset Registry",
        action="Portfolio Health Analysis",
        label="Asset analysis",
        text=(
            "Analyze the following digital asset registry data.\n"
            "Task:\n"
            "1. Calculate Health Score (0-100)\n"
            "2. Provide Summary\n"
            "3. Actionable Recommendations\n"
            "4. Critical Replacements.\n\n"
            "Asset Data: $asset_data\n\n"
            'Return as JSON with: {"healthScore": number, "summary": "string", "recommendations": ["string"], '
            '"criticalReplacements": [{"assetId": "string", "reason": "string"}]}'
        ),
    ),
    PromptTemplate(
        name="asset_health",
        task=TaskKind.STRUCTURED_SCORE,
        module="Asset Registry",
        action="Individual Health Audit",
        label="Asset health audit",
        text=(
            "Perform a forensic health audit for Digital Asset: $asset.\n"
            "Associated Vulnerabilities: $vulnerabilities.\n\n"
            "Calculate a 0-100 Health Score where:\n"
            "- 90-100: Pristine (No open vulns, current warranty)\n"
            "- 70-89: Warning (Minor vulns, aging hardware)\n"
            "- 0-69: Critical Risk (Critical unpatched vulns, EOL hardware)\n\n"
            'Return JSON: {"healthScore": number, "decomposition": ["factor1", "factor2"], "recommendation": "string"}'
        ),
    ),
    PromptTemplate(
        name="policy_gap",
        task=TaskKind.STRUCTURED_LIST,
        module="Policy Intelligence",
        action="Framework Gap Analysis",
        label="Policy gap analysis",
        text=(
            'Analyze policy "$policy_name" against $framework framework.\n\n'
            'Return JSON: {"score": number, "gaps": ["gap1", "gap2"], "recommendations": ["rec1", "rec2"]}'
        ),
    ),
]

TEMPLATES: Dict[str, PromptTemplate] = {template.name: template for template in _TEMPLATES}


def get_template(name: str) -> PromptTemplate:
    """Look up a template by name; raises KeyError for unknown names."""
    try:
        return TEMPLATES[name]
    except KeyError:
        raise KeyError(f"Unknown prompt template: {name}") from None


def list_templates() -> List[str]:
    return sorted(TEMPLATES)
