from uuid import uuid4

import pytest
from fastapi import HTTPException

from snowops_tickets.dependencies.auth import resolve_principal_from_headers
from snowops_tickets.tickets.principal import Principal, Role


def test_headers_resolve_to_principal():
    org_id, driver_id = uuid4(), uuid4()

    principal = resolve_principal_from_headers(
        {"X-User-Role": " contractor_admin ", "X-Org-ID": str(org_id), "X-Driver-ID": str(driver_id)}
    )

    assert principal == Principal(Role.CONTRACTOR_ADMIN, org_id=org_id, driver_id=driver_id)
    assert principal.is_contractor()


def test_blank_identifiers_are_absent():
    principal = resolve_principal_from_headers({"X-User-Role": "DRIVER", "X-Driver-ID": "  "})

    assert principal.driver_id is None
    assert principal.org_id is None


@pytest.mark.parametrize(
    "headers,status_code",
    [
        ({}, 401),
        ({"X-User-Role": "  "}, 401),
        ({"X-User-Role": "SUPERUSER"}, 400),
        ({"X-User-Role": "DRIVER", "X-Driver-ID": "driver-7"}, 400),
    ],
)
def test_bad_headers_are_rejected(headers, status_code):
    with pytest.raises(HTTPException) as exc:
        resolve_principal_from_headers(headers)

    assert exc.value.status_code == status_code
