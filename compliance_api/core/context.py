"""Request context dependencies: which tenant is being served, and by whom.

Authentication is handled upstream (API gateway); by the time a request reaches
this service the caller's tenant and actor have already been resolved into
headers.
"""

from fastapi import Header

from compliance_api.core.config import settings


async def get_tenant_id(
    x_tenant_id: str | None = Header(default=None, alias="X-Tenant-Id"),
) -> str:
    return x_tenant_id or settings.default_tenant_id


async def get_actor_id(
    x_actor_id: str | None = Header(default=None, alias="X-Actor-Id"),
) -> str | None:
    return x_actor_id
