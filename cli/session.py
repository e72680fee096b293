"""Explicit authentication state handed to the HTTP client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from models.records import UserRole, normalize_role


@dataclass
class AuthSession:
    """Bearer token plus the profile returned at login.

    The CLI never writes tokens to disk; a session lives for one invocation
    and is built from ``--token``/``OLIVE_MILL_TOKEN`` or a fresh login.
    """

    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[UserRole]:
        return normalize_role(self.user.get("role"))

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
