from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


RoleName = Literal["master_admin", "admin", "client", "auditor"]
ROLES: tuple[str, ...] = ("master_admin", "admin", "client", "auditor")


@dataclass(slots=True)
class Principal:
    """Verified caller identity derived from the bearer token."""

    user_id: str
    role: str
    tenant_id: str
    correlation_id: str | None = None
