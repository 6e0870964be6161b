from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from auditflow.core.schemas import ApiModel, WriteModel


UserRole = Literal["master_admin", "admin", "client", "auditor"]


class UserCreate(WriteModel):
    username: str = Field(min_length=3, max_length=128)
    full_name: str = Field(min_length=1)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=72)
    role: UserRole = "auditor"
    is_active: bool = True


class UserUpdate(WriteModel):
    username: str | None = Field(default=None, min_length=3, max_length=128)
    full_name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3, max_length=320)
    password: str | None = Field(default=None, min_length=8, max_length=72)
    role: UserRole | None = None
    is_active: bool | None = None


class UserRead(ApiModel):
    id: UUID
    tenant_id: str
    username: str
    full_name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime


class TenantRead(ApiModel):
    id: str
    name: str
    subdomain: str | None
    is_active: bool
    created_at: datetime
