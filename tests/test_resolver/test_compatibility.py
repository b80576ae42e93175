"""Tests for the compatibility resolver (stackforge.resolver.compatibility).

Covers:
- Conflicts, noted pairs and dependency warnings
- Suggestion rules
- Output ordering and key de-duplication
- Markdown report and matrix rendering
"""

from __future__ import annotations

import pytest

from stackforge.registry import CompatibilityEntry, IntegrationKey, IntegrationRegistry, IntegrationSelection
from stackforge.resolver import CompatibilityResolver, check_compatibility, render_matrix, render_report


pytestmark = pytest.mark.unit


def _select(**integrations: str) -> IntegrationSelection:
    return IntegrationSelection.from_mapping(integrations)


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


class TestCheck:
    def test_empty_selection_is_compatible(self):
        result = check_compatibility(IntegrationSelection())
        assert result.compatible is True
        assert result.conflicts == []
        assert result.warnings == []
        assert result.suggestions == []

    def test_supabase_auth_and_database_is_compatible_with_note(self):
        result = check_compatibility(_select(auth="supabase", database="supabase"))
        assert result.compatible is True
        assert result.conflicts == []
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.integration == "auth:supabase + database:supabase"
        assert warning.message.startswith("Recommended")
        assert warning.recommendation == "Consider the implications"

    def test_stripe_alone_suggests_email(self):
        result = check_compatibility(_select(payments="stripe"))
        assert result.compatible is True
        assert result.suggestions == [
            "Consider adding email integration for payment receipts and notifications"
        ]

    def test_supabase_auth_suggestions(self):
        result = check_compatibility(_select(auth="supabase"))
        assert result.suggestions == [
            "Consider using Supabase for database too - it's included with Supabase Auth",
            "Consider adding analytics to track user behavior and conversion",
        ]

    def test_clerk_auth_does_not_suggest_supabase_database(self):
        result = check_compatibility(_select(auth="clerk", analytics="posthog"))
        assert result.suggestions == []

    def test_missing_dependency_is_a_warning_not_a_conflict(self):
        result = check_compatibility(_select(storage="supabase"))
        assert result.compatible is True
        assert [w.message for w in result.warnings] == ["Requires auth:supabase"]
        assert result.warnings[0].recommendation == "Add auth:supabase to your integrations"

    def test_satisfied_dependency_has_no_warning(self):
        result = check_compatibility(_select(auth="supabase", storage="supabase"))
        assert all(not w.message.startswith("Requires") for w in result.warnings)

    def test_compatible_pair_without_note_is_silent(self):
        result = check_compatibility(_select(auth="clerk", payments="stripe", email="resend"))
        assert result.warnings == []

    def test_blank_provider_is_not_selected(self):
        result = check_compatibility(_select(auth="   "))
        assert result.suggestions == []


# ---------------------------------------------------------------------------
# check_keys (same-category audits)
# ---------------------------------------------------------------------------


class TestCheckKeys:
    def test_two_auth_providers_conflict(self):
        resolver = CompatibilityResolver()
        result = resolver.check_keys([IntegrationKey("auth", "clerk"), IntegrationKey("auth", "supabase")])
        assert result.compatible is False
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.integrations == ("auth:clerk", "auth:supabase")
        assert conflict.severity == "error"
        assert conflict.solution == "Use either Supabase Auth OR Clerk, not both"

    def test_conflict_is_found_in_either_order(self):
        resolver = CompatibilityResolver()
        a = resolver.check_keys([IntegrationKey("payments", "stripe"), IntegrationKey("payments", "paddle")])
        b = resolver.check_keys([IntegrationKey("payments", "paddle"), IntegrationKey("payments", "stripe")])
        assert not a.compatible and not b.compatible
        assert a.conflicts[0].reason == b.conflicts[0].reason

    def test_output_order_follows_key_order(self):
        keys = [
            IntegrationKey.parse(k)
            for k in ("auth:supabase", "auth:clerk", "payments:stripe", "payments:paddle", "storage:supabase")
        ]
        result = CompatibilityResolver().check_keys(keys)
        assert [c.integrations for c in result.conflicts] == [
            ("auth:supabase", "auth:clerk"),
            ("payments:stripe", "payments:paddle"),
        ]
        assert [w.integration for w in result.warnings] == ["auth:supabase + storage:supabase"]

    def test_pair_warnings_precede_dependency_warnings(self):
        keys = [
            IntegrationKey.parse(k)
            for k in ("storage:supabase", "storage:uploadthing", "ai:anthropic", "ai:openai")
        ]
        result = CompatibilityResolver().check_keys(keys)
        assert result.conflicts == []
        assert [(w.integration, w.message) for w in result.warnings] == [
            (
                "storage:supabase + storage:uploadthing",
                "Both provide file storage - consider using one for simplicity",
            ),
            (
                "ai:anthropic + ai:openai",
                "Using multiple AI providers is fine - consider a unified interface",
            ),
            ("storage:supabase", "Requires auth:supabase"),
        ]

    def test_noted_pair_warning_is_the_same_in_either_order(self):
        resolver = CompatibilityResolver()
        auth, db = IntegrationKey("auth", "supabase"), IntegrationKey("database", "supabase")
        forward = resolver.check_keys([auth, db]).warnings
        backward = resolver.check_keys([db, auth]).warnings
        assert len(forward) == len(backward) == 1
        assert forward[0].message == backward[0].message
        assert forward[0].recommendation == backward[0].recommendation

    def test_conflict_solution_is_the_same_in_either_order(self):
        resolver = CompatibilityResolver()
        supabase, clerk = IntegrationKey("auth", "supabase"), IntegrationKey("auth", "clerk")
        forward = resolver.check_keys([supabase, clerk]).conflicts[0]
        backward = resolver.check_keys([clerk, supabase]).conflicts[0]
        assert (forward.reason, forward.solution) == (backward.reason, backward.solution)

    def test_repeated_keys_collapse(self):
        resolver = CompatibilityResolver()
        key = IntegrationKey("auth", "supabase")
        result = resolver.check_keys([key, key, IntegrationKey("database", "supabase")])
        assert len(result.warnings) == 1

    def test_default_conflict_reason(self):
        registry = IntegrationRegistry(
            compatibility={("a:x", "b:y"): CompatibilityEntry(compatible=False)}
        )
        result = CompatibilityResolver(registry, rules=()).check_keys(
            [IntegrationKey("a", "x"), IntegrationKey("b", "y")]
        )
        assert result.conflicts[0].reason == "Incompatible integrations"

    def test_compatible_iff_no_error_conflicts(self):
        resolver = CompatibilityResolver()
        keys = [IntegrationKey.parse(k) for k in ("auth:supabase", "auth:clerk", "payments:stripe")]
        result = resolver.check_keys(keys)
        assert result.compatible == (not any(c.severity == "error" for c in result.conflicts))

    def test_custom_rules(self):
        resolver = CompatibilityResolver(rules=[lambda active: "always"])
        assert resolver.check(IntegrationSelection()).suggestions == ["always"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_report_compatible(self):
        report = render_report(_select(payments="stripe"))
        assert report.startswith("# Integration Compatibility Report")
        assert "## Status: ✅ Compatible" in report
        assert "- **payments**: stripe" in report
        assert "### 💡 Suggestions" in report
        assert "STRIPE_SECRET_KEY=" in report
        assert "### ❌ Conflicts" not in report

    def test_report_lists_warnings(self):
        report = render_report(_select(storage="supabase"))
        assert "### ⚠️ Warnings" in report
        assert "Requires auth:supabase" in report

    def test_matrix_marks_conflicts(self):
        keys = [IntegrationKey("auth", "supabase"), IntegrationKey("auth", "clerk")]
        matrix = render_matrix(keys)
        assert matrix.startswith("# Integration Compatibility Matrix")
        assert "❌" in matrix.split("```")[1]

    def test_matrix_defaults_to_known_keys(self, registry):
        matrix = render_matrix()
        body = matrix.split("```")[1].strip().splitlines()
        assert len(body) == len(registry.known_keys()) + 1

    def test_matrix_labels_are_distinct(self, registry):
        header = render_matrix().split("```")[1].strip("\n").splitlines()[0]
        labels = header.split()
        assert len(labels) == len(registry.known_keys())
        assert len(set(labels)) == len(labels)
        assert {"Supa/au", "Supa/da", "Supa/st"} <= set(labels)
