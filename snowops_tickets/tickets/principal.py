from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from .errors import InvalidInputError, MissingOrganizationError, PermissionDeniedError


class Role(str, Enum):
    """Supported roles."""

    AKIMAT_ADMIN = "AKIMAT_ADMIN"
    TOO_ADMIN = "TOO_ADMIN"
    CONTRACTOR_ADMIN = "CONTRACTOR_ADMIN"
    DRIVER = "DRIVER"

    @classmethod
    def parse(cls, value: str) -> Role:
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise InvalidInputError("unknown role") from exc


@dataclass(frozen=True, slots=True)
class Principal:
    """Resolved identity of the caller, produced upstream by the auth gateway."""

    role: Role
    org_id: UUID | None = None
    driver_id: UUID | None = None

    def is_akimat(self) -> bool:
        return self.role is Role.AKIMAT_ADMIN

    def is_too(self) -> bool:
        return self.role is Role.TOO_ADMIN

    def is_contractor(self) -> bool:
        return self.role is Role.CONTRACTOR_ADMIN

    def is_driver(self) -> bool:
        return self.role is Role.DRIVER

    def require_org_id(self) -> UUID:
        if self.org_id is None:
            raise MissingOrganizationError()
        return self.org_id

    def require_driver_id(self) -> UUID:
        if self.driver_id is None:
            raise PermissionDeniedError("missing driver id")
        return self.driver_id
