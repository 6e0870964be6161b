from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from auditflow.iam.repository import UserRepository
from auditflow.iam.schemas import UserRead
from auditflow.iam.security import get_password_hash
from auditflow.platform.crud import CrudService


def _hash_password_field(payload: dict[str, Any]) -> dict[str, Any]:
    password = payload.pop("password", None)
    if password is not None:
        payload["password_hash"] = get_password_hash(password)
    return payload


@dataclass(slots=True)
class UserService(CrudService):
    repository: UserRepository = field(default_factory=UserRepository)
    read_model: type[UserRead] = UserRead

    def prepare_create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return _hash_password_field(payload)

    def prepare_update(self, patch: dict[str, Any]) -> dict[str, Any]:
        return _hash_password_field(patch)


user_service = UserService()
