from collections.abc import Mapping
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request

from snowops_tickets.tickets.errors import InvalidInputError
from snowops_tickets.tickets.principal import Principal, Role

ROLE_HEADER = "X-User-Role"
ORG_HEADER = "X-Org-ID"
DRIVER_HEADER = "X-Driver-ID"


def _header_uuid(headers: Mapping[str, str], name: str) -> UUID | None:
    raw = (headers.get(name) or "").strip()
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"invalid {name}") from exc


def resolve_principal_from_headers(headers: Mapping[str, str]) -> Principal:
    """Build the principal from the identity headers set by the auth gateway.

    Tokens are validated upstream; this only decodes what the gateway
    forwarded.
    """

    raw_role = (headers.get(ROLE_HEADER) or "").strip()
    if not raw_role:
        raise HTTPException(status_code=401, detail="missing role")
    try:
        role = Role.parse(raw_role)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return Principal(
        role=role,
        org_id=_header_uuid(headers, ORG_HEADER),
        driver_id=_header_uuid(headers, DRIVER_HEADER),
    )


async def get_current_principal(request: Request) -> Principal:
    cached = getattr(request.state, "principal", None)
    if isinstance(cached, Principal):
        return cached

    principal = resolve_principal_from_headers(request.headers)
    request.state.principal = principal
    return principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
