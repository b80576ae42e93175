"""Static integration knowledge base.

Every table is keyed by a typed ``IntegrationKey`` (never by a concatenated
string) and frozen behind ``MappingProxyType`` once built.  A lookup for a key
the registry has never heard of returns an empty result, so integrations added
to the selection UI ahead of the registry degrade to "no constraint".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Optional

from .models import CompatibilityEntry, IntegrationKey, PackageRequirement


def _k(value: str) -> IntegrationKey:
    return IntegrationKey.parse(value)


# ---------------------------------------------------------------------------
# Compatibility (sparse, stored in one direction only)
# ---------------------------------------------------------------------------

_COMPATIBILITY: dict[tuple[str, str], CompatibilityEntry] = {
    ("auth:supabase", "auth:clerk"): CompatibilityEntry(
        compatible=False,
        note="Both provide authentication - choose one",
        solution="Use either Supabase Auth OR Clerk, not both",
    ),
    ("auth:supabase", "database:supabase"): CompatibilityEntry(
        compatible=True,
        note="Recommended: Use Supabase for both auth and database",
    ),
    ("auth:supabase", "payments:stripe"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "email:resend"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "analytics:posthog"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "analytics:plausible"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "ai:openai"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "ai:anthropic"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "search:algolia"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "storage:uploadthing"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "storage:supabase"): CompatibilityEntry(
        compatible=True,
        note="Recommended: Use Supabase for auth, database, AND storage",
    ),
    ("auth:supabase", "cms:sanity"): CompatibilityEntry(compatible=True),
    ("auth:supabase", "monitoring:sentry"): CompatibilityEntry(compatible=True),
    ("auth:clerk", "database:supabase"): CompatibilityEntry(
        compatible=True,
        note="Use Clerk for auth, Supabase for database only",
    ),
    ("auth:clerk", "payments:stripe"): CompatibilityEntry(compatible=True),
    ("auth:clerk", "email:resend"): CompatibilityEntry(compatible=True),
    ("auth:clerk", "analytics:posthog"): CompatibilityEntry(compatible=True),
    ("payments:stripe", "payments:paddle"): CompatibilityEntry(
        compatible=False,
        note="Both are payment processors - choose one",
        solution="Use Stripe for global payments OR Paddle for EU/SaaS focus",
    ),
    ("analytics:posthog", "analytics:plausible"): CompatibilityEntry(
        compatible=True,
        note="Using both is fine - Plausible for privacy-focused, PostHog for product analytics",
    ),
    ("ai:openai", "ai:anthropic"): CompatibilityEntry(
        compatible=True,
        note="Using multiple AI providers is fine - consider a unified interface",
    ),
    ("storage:uploadthing", "storage:supabase"): CompatibilityEntry(
        compatible=True,
        note="Both provide file storage - consider using one for simplicity",
    ),
}

_DEPENDENCIES: dict[str, list[str]] = {
    "storage:supabase": ["auth:supabase"],
}

_ENV_VARS: dict[str, list[str]] = {
    "auth:supabase": ["NEXT_PUBLIC_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_ANON_KEY"],
    "auth:clerk": ["NEXT_PUBLIC_CLERK_PUBLISHABLE_KEY", "CLERK_SECRET_KEY"],
    "database:supabase": [
        "NEXT_PUBLIC_SUPABASE_URL",
        "NEXT_PUBLIC_SUPABASE_ANON_KEY",
        "SUPABASE_SERVICE_ROLE_KEY",
    ],
    "payments:stripe": [
        "STRIPE_SECRET_KEY",
        "NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY",
        "STRIPE_WEBHOOK_SECRET",
    ],
    "payments:paddle": ["PADDLE_VENDOR_ID", "PADDLE_API_KEY", "PADDLE_WEBHOOK_SECRET"],
    "email:resend": ["RESEND_API_KEY", "EMAIL_FROM"],
    "analytics:posthog": ["NEXT_PUBLIC_POSTHOG_KEY", "NEXT_PUBLIC_POSTHOG_HOST"],
    "analytics:plausible": ["NEXT_PUBLIC_PLAUSIBLE_DOMAIN"],
    "ai:openai": ["OPENAI_API_KEY"],
    "ai:anthropic": ["ANTHROPIC_API_KEY"],
    "search:algolia": [
        "NEXT_PUBLIC_ALGOLIA_APP_ID",
        "NEXT_PUBLIC_ALGOLIA_SEARCH_KEY",
        "ALGOLIA_ADMIN_KEY",
    ],
    "storage:uploadthing": ["UPLOADTHING_SECRET", "UPLOADTHING_APP_ID"],
    "storage:supabase": ["NEXT_PUBLIC_SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_ANON_KEY"],
    "cms:sanity": [
        "NEXT_PUBLIC_SANITY_PROJECT_ID",
        "NEXT_PUBLIC_SANITY_DATASET",
        "SANITY_API_TOKEN",
    ],
    "monitoring:sentry": ["NEXT_PUBLIC_SENTRY_DSN", "SENTRY_AUTH_TOKEN"],
}

_PACKAGES: dict[str, tuple[str, str]] = {
    "auth:supabase": ("@supabase/ssr", "^0.5.2"),
    "auth:clerk": ("@clerk/nextjs", "^6.9.0"),
    "database:supabase": ("@supabase/supabase-js", "^2.47.10"),
    "payments:stripe": ("stripe", "^17.4.0"),
    "payments:paddle": ("@paddle/paddle-node-sdk", "^2.3.0"),
    "email:resend": ("resend", "^3.2.0"),
    "analytics:posthog": ("posthog-js", "^1.100.0"),
    "analytics:plausible": ("next-plausible", "^3.12.0"),
    "ai:openai": ("openai", "^4.28.0"),
    "ai:anthropic": ("@anthropic-ai/sdk", "^0.32.1"),
    "search:algolia": ("algoliasearch", "^5.15.0"),
    "storage:uploadthing": ("uploadthing", "^7.4.0"),
    "storage:supabase": ("@supabase/storage-js", "^2.7.1"),
    "cms:sanity": ("next-sanity", "^9.8.0"),
    "monitoring:sentry": ("@sentry/nextjs", "^8.42.0"),
}

# Framework dependencies present in every generated package manifest.
BASE_DEPENDENCIES: Mapping[str, str] = MappingProxyType({
    "next": "^15.0.0",
    "react": "^19.0.0",
    "react-dom": "^19.0.0",
})

# ---------------------------------------------------------------------------
# UI expectations (shared by the assembler and the fidelity scorer)
# ---------------------------------------------------------------------------

CORE_COMPONENTS: tuple[str, ...] = ("Nav", "Hero", "Footer", "FeatureCards", "CTA")

_CATEGORY_COMPONENTS: dict[str, list[str]] = {
    "auth": ["LoginForm", "SignupForm", "UserMenu"],
    "payments": ["PricingTable", "CheckoutButton"],
    "analytics": ["AnalyticsProvider"],
}

CORE_CSS_VARIABLES: tuple[str, ...] = (
    "--primary",
    "--primary-foreground",
    "--secondary",
    "--secondary-foreground",
    "--background",
    "--foreground",
    "--card",
    "--card-foreground",
    "--border",
    "--ring",
    "--accent",
    "--accent-foreground",
    "--destructive",
    "--destructive-foreground",
    "--muted",
    "--muted-foreground",
    "--radius",
)

# Routes every exported app is expected to have, relative to ``app/``.
UNIVERSAL_ROUTES: tuple[str, ...] = ("page.tsx", "layout.tsx", "globals.css")

_TEMPLATE_ROUTES: dict[str, list[str]] = {
    "saas": ["pricing/page.tsx", "dashboard/page.tsx"],
}

_INTEGRATION_ROUTES: dict[str, list[str]] = {
    "auth:supabase": ["(auth)/login/page.tsx", "auth/callback/route.ts"],
    "auth:clerk": ["sign-in/[[...sign-in]]/page.tsx", "sign-up/[[...sign-up]]/page.tsx"],
    "payments:stripe": ["api/stripe/checkout/route.ts", "api/webhooks/stripe/route.ts"],
}

# Where protected pages send anonymous visitors, per auth provider.
_LOGIN_ROUTES: dict[str, str] = {
    "auth:supabase": "/login",
    "auth:clerk": "/sign-in",
}

# ---------------------------------------------------------------------------
# Template file manifests
# ---------------------------------------------------------------------------

_TEMPLATE_FILES: dict[str, list[str]] = {
    "saas": [
        "app/layout.tsx",
        "app/page.tsx",
        "next-env.d.ts",
        "next.config.js",
        "package.json",
        "template.json",
        "tsconfig.json",
    ],
    "seo-directory": [
        "components.json",
        "eslint.config.mjs",
        "next-env.d.ts",
        "next.config.ts",
        "package.json",
        "postcss.config.mjs",
        "PROJECT.md",
        "README.md",
        "template.json",
        "tsconfig.json",
        "src/app/favicon.ico",
        "src/app/globals.css",
        "src/app/layout.tsx",
        "src/app/page.tsx",
        "src/components/ui/badge.tsx",
        "src/components/ui/button.tsx",
        "src/components/ui/card.tsx",
        "src/components/ui/input.tsx",
        "src/components/ui/separator.tsx",
        "src/components/ui/tabs.tsx",
        "src/lib/utils.ts",
    ],
    "flagship-saas": [
        "demo.mjs",
        "README.md",
    ],
}

_INTEGRATION_FILES: dict[str, dict[str, list[str]]] = {
    "saas": {
        "auth:supabase": [
            "integrations/auth/supabase/app/api/auth/callback/route.ts",
            "integrations/auth/supabase/app/login/page.tsx",
            "integrations/auth/supabase/components/auth/auth-button.tsx",
            "integrations/auth/supabase/integration.json",
            "integrations/auth/supabase/lib/supabase.ts",
            "integrations/auth/supabase/middleware.ts",
            "integrations/auth/supabase/package.json",
        ],
        "auth:clerk": [
            "integrations/auth/clerk/app/sign-in/[[...sign-in]]/page.tsx",
            "integrations/auth/clerk/app/sign-up/[[...sign-up]]/page.tsx",
            "integrations/auth/clerk/components/auth/clerk-provider-wrapper.tsx",
            "integrations/auth/clerk/components/auth/user-button.tsx",
            "integrations/auth/clerk/integration.json",
            "integrations/auth/clerk/middleware.ts",
            "integrations/auth/clerk/package.json",
        ],
        "payments:stripe": [
            "integrations/payments/stripe/app/api/stripe/checkout/route.ts",
            "integrations/payments/stripe/app/api/stripe/portal/route.ts",
            "integrations/payments/stripe/app/api/stripe/webhook/route.ts",
            "integrations/payments/stripe/components/pricing/pricing-cards.tsx",
            "integrations/payments/stripe/integration.json",
            "integrations/payments/stripe/lib/stripe.ts",
            "integrations/payments/stripe/package.json",
        ],
        "email:resend": [
            "integrations/email/resend/app/api/email/send/route.ts",
            "integrations/email/resend/emails/welcome-email.tsx",
            "integrations/email/resend/integration.json",
            "integrations/email/resend/lib/resend.ts",
            "integrations/email/resend/package.json",
        ],
        "database:supabase": [
            "integrations/database/supabase/integration.json",
            "integrations/database/supabase/lib/database.ts",
            "integrations/database/supabase/package.json",
        ],
        "ai:openai": [
            "integrations/ai/openai/app/api/ai/chat/route.ts",
            "integrations/ai/openai/app/api/ai/completion/route.ts",
            "integrations/ai/openai/components/ai/chat-interface.tsx",
            "integrations/ai/openai/integration.json",
            "integrations/ai/openai/lib/openai.ts",
            "integrations/ai/openai/package.json",
        ],
        "ai:anthropic": [
            "integrations/ai/anthropic/app/api/ai/claude/route.ts",
            "integrations/ai/anthropic/components/ai/claude-chat.tsx",
            "integrations/ai/anthropic/integration.json",
            "integrations/ai/anthropic/lib/anthropic.ts",
            "integrations/ai/anthropic/package.json",
        ],
        "analytics:posthog": [
            "integrations/analytics/posthog/components/analytics/posthog-provider.tsx",
            "integrations/analytics/posthog/components/analytics/use-posthog.tsx",
            "integrations/analytics/posthog/integration.json",
            "integrations/analytics/posthog/lib/posthog.ts",
            "integrations/analytics/posthog/package.json",
        ],
        "analytics:plausible": [
            "integrations/analytics/plausible/components/analytics/plausible-provider.tsx",
            "integrations/analytics/plausible/components/analytics/use-plausible.tsx",
            "integrations/analytics/plausible/integration.json",
            "integrations/analytics/plausible/package.json",
        ],
    },
}


# ---------------------------------------------------------------------------
# IntegrationRegistry
# ---------------------------------------------------------------------------


def _freeze_keyed(table: Mapping[str, Iterable[str]]) -> Mapping[IntegrationKey, tuple[str, ...]]:
    return MappingProxyType({_k(key): tuple(values) for key, values in table.items()})


class IntegrationRegistry:
    """Read-only lookups over the integration tables.

    The constructor accepts string-keyed tables (the literal form above) so a
    caller can build a registry with extra or replacement data; everything is
    converted to typed keys and frozen.  All lookups return an empty result
    for unknown keys.
    """

    def __init__(
        self,
        *,
        compatibility: Mapping[tuple[str, str], CompatibilityEntry] | None = None,
        dependencies: Mapping[str, Iterable[str]] | None = None,
        env_vars: Mapping[str, Iterable[str]] | None = None,
        packages: Mapping[str, tuple[str, str]] | None = None,
        category_components: Mapping[str, Iterable[str]] | None = None,
        template_routes: Mapping[str, Iterable[str]] | None = None,
        integration_routes: Mapping[str, Iterable[str]] | None = None,
        template_files: Mapping[str, Iterable[str]] | None = None,
        integration_files: Mapping[str, Mapping[str, Iterable[str]]] | None = None,
        login_routes: Mapping[str, str] | None = None,
    ) -> None:
        compat = _COMPATIBILITY if compatibility is None else compatibility
        self._compatibility: Mapping[tuple[IntegrationKey, IntegrationKey], CompatibilityEntry] = (
            MappingProxyType({(_k(a), _k(b)): entry for (a, b), entry in compat.items()})
        )
        deps = _DEPENDENCIES if dependencies is None else dependencies
        self._dependencies: Mapping[IntegrationKey, tuple[IntegrationKey, ...]] = MappingProxyType(
            {_k(key): tuple(_k(d) for d in targets) for key, targets in deps.items()}
        )
        self._env_vars = _freeze_keyed(_ENV_VARS if env_vars is None else env_vars)
        pkgs = _PACKAGES if packages is None else packages
        self._packages: Mapping[IntegrationKey, PackageRequirement] = MappingProxyType(
            {_k(key): PackageRequirement(name=n, version=v) for key, (n, v) in pkgs.items()}
        )
        comps = _CATEGORY_COMPONENTS if category_components is None else category_components
        self._category_components: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {cat: tuple(names) for cat, names in comps.items()}
        )
        troutes = _TEMPLATE_ROUTES if template_routes is None else template_routes
        self._template_routes: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {t: tuple(r) for t, r in troutes.items()}
        )
        self._integration_routes = _freeze_keyed(
            _INTEGRATION_ROUTES if integration_routes is None else integration_routes
        )
        tfiles = _TEMPLATE_FILES if template_files is None else template_files
        self._template_files: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {t: tuple(files) for t, files in tfiles.items()}
        )
        ifiles = _INTEGRATION_FILES if integration_files is None else integration_files
        self._integration_files: Mapping[str, Mapping[IntegrationKey, tuple[str, ...]]] = (
            MappingProxyType({t: _freeze_keyed(per_key) for t, per_key in ifiles.items()})
        )
        logins = _LOGIN_ROUTES if login_routes is None else login_routes
        self._login_routes: Mapping[IntegrationKey, str] = MappingProxyType(
            {_k(key): route for key, route in logins.items()}
        )

    # -- Compatibility -----------------------------------------------------

    def compatibility(self, a: IntegrationKey, b: IntegrationKey) -> Optional[CompatibilityEntry]:
        """Entry stored for the ordered pair ``(a, b)`` only."""
        return self._compatibility.get((a, b))

    def lookup_pair(self, a: IntegrationKey, b: IntegrationKey) -> Optional[CompatibilityEntry]:
        """Entry for ``(a, b)``, falling back to ``(b, a)``."""
        entry = self._compatibility.get((a, b))
        if entry is None:
            entry = self._compatibility.get((b, a))
        return entry

    # -- Per-key requirements ---------------------------------------------

    def dependencies(self, key: IntegrationKey) -> tuple[IntegrationKey, ...]:
        return self._dependencies.get(key, ())

    def env_vars(self, key: IntegrationKey) -> tuple[str, ...]:
        return self._env_vars.get(key, ())

    def package(self, key: IntegrationKey) -> Optional[PackageRequirement]:
        return self._packages.get(key)

    def components_for(self, category: str) -> tuple[str, ...]:
        return self._category_components.get(category, ())

    def routes_for_template(self, template: str | None) -> tuple[str, ...]:
        return self._template_routes.get(template or "", ())

    def routes_for_integration(self, key: IntegrationKey) -> tuple[str, ...]:
        return self._integration_routes.get(key, ())

    def login_route(self, key: IntegrationKey) -> Optional[str]:
        return self._login_routes.get(key)

    def expected_components(self, keys: Iterable[IntegrationKey]) -> list[str]:
        """Core components plus the names each active category adds."""
        names = list(CORE_COMPONENTS)
        seen_categories: set[str] = set()
        for key in keys:
            if key.category in seen_categories:
                continue
            seen_categories.add(key.category)
            names.extend(n for n in self.components_for(key.category) if n not in names)
        return names

    def expected_routes(self, template: str | None, keys: Iterable[IntegrationKey]) -> list[str]:
        """Universal routes, then template routes, then integration routes."""
        routes = list(UNIVERSAL_ROUTES)
        routes.extend(self.routes_for_template(template))
        for key in keys:
            routes.extend(r for r in self.routes_for_integration(key) if r not in routes)
        return routes

    # -- Template manifests -----------------------------------------------

    def template_files(self, template: str | None) -> tuple[str, ...]:
        return self._template_files.get(template or "", ())

    def integration_files(self, template: str | None, key: IntegrationKey) -> tuple[str, ...]:
        per_template = self._integration_files.get(template or "")
        if per_template is None:
            return ()
        return per_template.get(key, ())

    def templates(self) -> list[str]:
        return sorted(self._template_files)

    def known_keys(self) -> list[IntegrationKey]:
        """Every key the registry holds any data for, in a stable order."""
        keys: set[IntegrationKey] = set(self._env_vars) | set(self._packages) | set(self._dependencies)
        for a, b in self._compatibility:
            keys.update((a, b))
        return sorted(keys, key=str)


_DEFAULT_REGISTRY: IntegrationRegistry | None = None


def default_registry() -> IntegrationRegistry:
    """Process-wide registry built from the literal tables in this module."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = IntegrationRegistry()
    return _DEFAULT_REGISTRY
