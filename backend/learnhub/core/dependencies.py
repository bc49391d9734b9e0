"""FastAPI dependencies for caller identity."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, status

from learnhub.core.app_exceptions import ErrorCode, raise_app_error


@dataclass(frozen=True)
class CallerIdentity:
    """Tenant and user the request acts for.

    Resolved from plain headers; the tenant-resolution and authentication
    layers in front of this service are responsible for setting them.
    """

    tenant_id: str
    user_id: str


def get_caller(
    x_tenant_id: Annotated[str | None, Header(alias="X-Tenant-Id")] = None,
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> CallerIdentity:
    """Extract the caller identity from request headers."""
    tenant_id = (x_tenant_id or "").strip()
    user_id = (x_user_id or "").strip()
    if not tenant_id or not user_id:
        raise_app_error(
            status.HTTP_401_UNAUTHORIZED,
            ErrorCode.IDENTITY_REQUIRED,
            "X-Tenant-Id and X-User-Id headers are required",
        )
    return CallerIdentity(tenant_id=tenant_id, user_id=user_id)


Caller = Annotated[CallerIdentity, Depends(get_caller)]
