"""Core data model shared by the resolvers, the scaffolder and the scorer.

An integration is identified by a ``(category, provider)`` pair.  A selection
holds at most one provider per category and keeps the caller's insertion
order, which drives the ordering of every derived report.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field


class SelectionError(ValueError):
    """Raised when a selection violates the one-provider-per-category rule
    or carries malformed category/provider values."""


# ---------------------------------------------------------------------------
# IntegrationKey
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IntegrationKey:
    """A ``(category, provider)`` pair, e.g. ``auth:supabase``."""

    category: str
    provider: str

    def __str__(self) -> str:
        return f"{self.category}:{self.provider}"

    @classmethod
    def parse(cls, value: str) -> "IntegrationKey":
        """Parse ``"category:provider"`` into a key.

        Raises:
            SelectionError: If either half is missing.
        """
        category, sep, provider = value.partition(":")
        if not sep or not category.strip() or not provider.strip():
            raise SelectionError(f"Invalid integration key: {value!r}")
        return cls(category.strip(), provider.strip())


# ---------------------------------------------------------------------------
# IntegrationSelection
# ---------------------------------------------------------------------------


class _ObjectPairs(list):
    """Key/value pairs of one decoded JSON object, duplicates preserved."""


@dataclass(frozen=True)
class IntegrationSelection:
    """Immutable, ordered mapping of category -> provider.

    Unselected categories (empty or ``None`` provider) are dropped at
    construction time, so every entry is an active integration.
    """

    entries: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> "IntegrationSelection":
        """Build a selection from a ``{category: provider}`` mapping."""
        if mapping is None:
            return cls()
        if not isinstance(mapping, Mapping):
            raise SelectionError("Selection must be an object of category -> provider")
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[Any, Any]]) -> "IntegrationSelection":
        """Build a selection from ``(category, provider)`` pairs.

        Raises:
            SelectionError: On a repeated category or a non-string value.
        """
        seen: set[str] = set()
        entries: list[tuple[str, str]] = []
        for category, provider in pairs:
            if not isinstance(category, str) or not category.strip():
                raise SelectionError(f"Invalid category: {category!r}")
            if category in seen:
                raise SelectionError(
                    f"Category {category!r} selected more than once; "
                    "choose one provider per category"
                )
            seen.add(category)
            if provider is None:
                continue
            if not isinstance(provider, str):
                raise SelectionError(
                    f"Provider for {category!r} must be a string, got {type(provider).__name__}"
                )
            provider = provider.strip()
            if provider:
                entries.append((category, provider))
        return cls(tuple(entries))

    @classmethod
    def from_json(cls, text: str) -> "IntegrationSelection":
        """Parse a JSON object, rejecting duplicate categories.

        ``json.loads`` silently keeps the last duplicate key, so the raw pairs
        are collected through ``object_pairs_hook`` instead.
        """
        try:
            pairs = json.loads(text, object_pairs_hook=_ObjectPairs)
        except json.JSONDecodeError as exc:
            raise SelectionError(f"Selection is not valid JSON: {exc}") from exc
        if not isinstance(pairs, _ObjectPairs):
            raise SelectionError("Selection must be a JSON object")
        return cls.from_pairs(pairs)

    # -- Mapping-like access -----------------------------------------------

    def keys(self) -> list[IntegrationKey]:
        """Active integration keys in insertion order."""
        return [IntegrationKey(c, p) for c, p in self.entries]

    def get(self, category: str) -> Optional[str]:
        for c, p in self.entries:
            if c == category:
                return p
        return None

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, IntegrationKey):
            return self.get(item.category) == item.provider
        if isinstance(item, str):
            return self.get(item) is not None
        return False

    def __iter__(self) -> Iterator[IntegrationKey]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


# ---------------------------------------------------------------------------
# Registry entries
# ---------------------------------------------------------------------------


class CompatibilityEntry(BaseModel):
    """Pairwise compatibility note between two integrations."""

    model_config = {"frozen": True}

    compatible: bool = Field(..., description="Whether the pair may be selected together")
    note: Optional[str] = Field(default=None, description="Human-readable note")
    solution: Optional[str] = Field(default=None, description="Suggested resolution")


class PackageRequirement(BaseModel):
    """An npm dependency contributed by one integration."""

    model_config = {"frozen": True}

    name: str = Field(..., description="npm package name")
    version: str = Field(..., description="Version range, e.g. '^17.4.0'")
