"""Cloud account entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Account:
    """Subscription reachable by the current credential."""

    id: str
    display_name: str
    tenant_id: str
    state: str
    is_default: bool

    @staticmethod
    def from_cli_entry(entry: Mapping[str, Any]) -> Account:
        """Build an account from one `az account list` JSON entry."""
        return Account(
            id=str(entry.get("id") or ""),
            display_name=str(entry.get("name") or ""),
            tenant_id=str(entry.get("tenantId") or ""),
            state=str(entry.get("state") or "Unknown"),
            is_default=bool(entry.get("isDefault", False)),
        )

    def matches(self, identifier: str) -> bool:
        """Match by subscription id first, display name second, ignoring case."""
        wanted = identifier.strip().lower()
        return wanted in (self.id.lower(), self.display_name.lower())
