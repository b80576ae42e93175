"""Tests for the IntegrationRegistry lookups (stackforge.registry.catalog)."""

from __future__ import annotations

import pytest

from stackforge.registry import (
    CORE_COMPONENTS,
    CORE_CSS_VARIABLES,
    UNIVERSAL_ROUTES,
    CompatibilityEntry,
    IntegrationKey,
    IntegrationRegistry,
    default_registry,
)


pytestmark = pytest.mark.unit

AUTH_SUPABASE = IntegrationKey("auth", "supabase")
AUTH_CLERK = IntegrationKey("auth", "clerk")
DB_SUPABASE = IntegrationKey("database", "supabase")
STRIPE = IntegrationKey("payments", "stripe")


# ---------------------------------------------------------------------------
# Compatibility lookups
# ---------------------------------------------------------------------------


class TestCompatibilityLookup:
    def test_lookup_pair_is_symmetric(self, registry):
        forward = registry.lookup_pair(AUTH_SUPABASE, DB_SUPABASE)
        backward = registry.lookup_pair(DB_SUPABASE, AUTH_SUPABASE)
        assert forward is not None
        assert forward == backward

    def test_compatibility_is_one_directional(self, registry):
        assert registry.compatibility(AUTH_SUPABASE, DB_SUPABASE) is not None
        assert registry.compatibility(DB_SUPABASE, AUTH_SUPABASE) is None

    def test_conflicting_pair(self, registry):
        entry = registry.lookup_pair(AUTH_CLERK, AUTH_SUPABASE)
        assert entry is not None
        assert entry.compatible is False
        assert entry.solution

    def test_unknown_pair_is_none(self, registry):
        assert registry.lookup_pair(IntegrationKey("x", "y"), STRIPE) is None


# ---------------------------------------------------------------------------
# Per-key data
# ---------------------------------------------------------------------------


class TestPerKeyData:
    def test_env_vars(self, registry):
        assert registry.env_vars(STRIPE) == (
            "STRIPE_SECRET_KEY",
            "NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY",
            "STRIPE_WEBHOOK_SECRET",
        )

    def test_unknown_key_yields_empty_results(self, registry):
        unknown = IntegrationKey("crm", "hubspot")
        assert registry.env_vars(unknown) == ()
        assert registry.dependencies(unknown) == ()
        assert registry.package(unknown) is None
        assert registry.routes_for_integration(unknown) == ()
        assert registry.login_route(unknown) is None

    def test_dependencies(self, registry):
        assert registry.dependencies(IntegrationKey("storage", "supabase")) == (AUTH_SUPABASE,)

    def test_package(self, registry):
        package = registry.package(STRIPE)
        assert package is not None
        assert package.name == "stripe"

    def test_login_routes(self, registry):
        assert registry.login_route(AUTH_SUPABASE) == "/login"
        assert registry.login_route(AUTH_CLERK) == "/sign-in"


# ---------------------------------------------------------------------------
# UI expectations
# ---------------------------------------------------------------------------


class TestExpectations:
    def test_core_tables(self):
        assert len(CORE_CSS_VARIABLES) == 17
        assert CORE_COMPONENTS == ("Nav", "Hero", "Footer", "FeatureCards", "CTA")
        assert UNIVERSAL_ROUTES == ("page.tsx", "layout.tsx", "globals.css")

    def test_expected_components_per_category(self, registry):
        names = registry.expected_components([AUTH_SUPABASE, STRIPE, IntegrationKey("analytics", "posthog")])
        assert names == [
            *CORE_COMPONENTS,
            "LoginForm",
            "SignupForm",
            "UserMenu",
            "PricingTable",
            "CheckoutButton",
            "AnalyticsProvider",
        ]

    def test_expected_components_category_counted_once(self, registry):
        names = registry.expected_components([AUTH_SUPABASE, AUTH_CLERK])
        assert names.count("LoginForm") == 1

    def test_expected_routes_depend_on_auth_provider(self, registry):
        supabase = registry.expected_routes("saas", [AUTH_SUPABASE])
        clerk = registry.expected_routes("saas", [AUTH_CLERK])
        assert supabase[:5] == ["page.tsx", "layout.tsx", "globals.css", "pricing/page.tsx", "dashboard/page.tsx"]
        assert "(auth)/login/page.tsx" in supabase
        assert "(auth)/login/page.tsx" not in clerk
        assert "sign-in/[[...sign-in]]/page.tsx" in clerk

    def test_expected_routes_unknown_template(self, registry):
        assert registry.expected_routes("blog", []) == list(UNIVERSAL_ROUTES)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_custom_tables(self):
        registry = IntegrationRegistry(
            compatibility={("a:x", "b:y"): CompatibilityEntry(compatible=False, note="nope")},
            env_vars={"a:x": ["A_KEY"]},
        )
        assert registry.lookup_pair(IntegrationKey("b", "y"), IntegrationKey("a", "x")).note == "nope"
        assert registry.env_vars(IntegrationKey("a", "x")) == ("A_KEY",)

    def test_tables_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._env_vars[STRIPE] = ("X",)  # type: ignore[index]

    def test_known_keys_sorted(self, registry):
        keys = registry.known_keys()
        assert [str(k) for k in keys] == sorted(str(k) for k in keys)
        assert STRIPE in keys

    def test_templates(self, registry):
        assert registry.templates() == ["flagship-saas", "saas", "seo-directory"]
