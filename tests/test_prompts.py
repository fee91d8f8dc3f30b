"""
Prompt template tests - named-slot interpolation without context validation.
"""

import pytest

from src.ai.prompts import (
    NO_MARKDOWN_INSTRUCTION,
    TEMPLATES,
    PromptTemplate,
    get_template,
    list_templates,
)
from src.ai.types import TaskKind


class TestPromptTemplate:
    """Test template interpolation."""

    def test_slots_listed_in_order(self):
        template = get_template("regulatory_impact")

        assert template.slots == ["regulation_name", "summary"]

    def test_interpolates_string_values(self):
        prompt = get_template("risk_insights").interpolate({"risk_data": "Vendor lock-in, impact 4"})

        assert prompt.startswith(
            "Analyze the following risk data and provide 3 key insights for the Board: Vendor lock-in, impact 4."
        )
        assert prompt.endswith(NO_MARKDOWN_INSTRUCTION)

    def test_numbers_rendered_with_str(self):
        template = PromptTemplate("t", TaskKind.FREE_TEXT_INSIGHT, "M", "A", "L", "Score $score of $max")

        assert template.interpolate({"score": 7.5, "max": 10}) == "Score 7.5 of 10"

    def test_structures_rendered_as_json(self):
        prompt = get_template("board_report").interpolate({"data": {"openRisks": 12, "owners": ["CRO"]}})

        assert '{"openRisks": 12, "owners": ["CRO"]}' in prompt

    def test_missing_slot_left_in_prompt(self):
        prompt = get_template("regulatory_impact").interpolate({"regulation_name": "DORA"})

        assert '"DORA"' in prompt
        assert "Summary: $summary." in prompt

    def test_extra_context_ignored(self):
        prompt = get_template("incident_analysis").interpolate({"description": "Ransomware", "unused": "x"})

        assert prompt.startswith('Crisis analysis for incident: "Ransomware".')

    def test_dollar_in_value_not_reinterpreted(self):
        prompt = get_template("incident_analysis").interpolate({"description": "$title cost $5k"})

        assert '"$title cost $5k"' in prompt

    def test_none_context(self):
        template = get_template("incident_analysis")

        assert template.interpolate(None) == template.text

    def test_audit_action_interpolates_slots(self):
        template = get_template("tabular_ingestion")

        assert template.audit_action({"target_module": "Risk"}) == "Risk Import"


class TestTemplateCatalogue:
    """Test the feature template catalogue."""

    def test_unknown_template_raises_key_error(self):
        with pytest.raises(KeyError):
            get_template("does_not_exist")

    def test_list_templates_sorted(self):
        names = list_templates()

        assert names == sorted(TEMPLATES)
        assert "risk_insights" in names
        assert "tabular_ingestion" in names

    @pytest.mark.parametrize("name", [
        "audit_insights",
        "policy_document_ingestion",
        "asset_risks",
        "asset_health",
        "policy_gap",
        "tabular_ingestion",
    ])
    def test_structured_templates_expect_json(self, name):
        template = get_template(name)

        assert template.expect_structured is True
        assert NO_MARKDOWN_INSTRUCTION not in template.text

    def test_free_text_templates_carry_no_markdown_instruction(self):
        free_text = [t for t in TEMPLATES.values() if t.task is TaskKind.FREE_TEXT_INSIGHT]

        assert len(free_text) >= 10
        for template in free_text:
            assert template.expect_structured is False
            assert NO_MARKDOWN_INSTRUCTION in template.text

    def test_every_template_has_audit_names(self):
        for template in TEMPLATES.values():
            assert template.module
            assert template.action
            assert template.label
