# backend/tenancy.py

"""
======================================================
PATH: backend/tenancy.py
======================================================
TENANT RESOLUTION (shared by every app's API)

The tenant comes from, in order:
- X-Tenant-ID header
- ?tenant_id= query param
- tenant_id body field

TenantScopedMixin:
- list/retrieve/update/delete only see rows of the request tenant
- create stamps the request tenant on the new row
"""

from __future__ import annotations

from rest_framework.exceptions import ValidationError

TENANT_HEADER = "HTTP_X_TENANT_ID"


def tenant_id_from(request, *, required: bool = True) -> str | None:
    tenant_id = (
        request.META.get(TENANT_HEADER)
        or request.query_params.get("tenant_id")
        or (request.data.get("tenant_id") if hasattr(request.data, "get") else None)
    )
    tenant_id = str(tenant_id or "").strip()
    if not tenant_id and required:
        raise ValidationError({"tenant_id": "tenant_id is required (X-Tenant-ID header or tenant_id param)"})
    return tenant_id or None


class TenantScopedMixin:
    """
    For viewsets over models carrying a tenant_id (or reaching one through
    `tenant_lookup`, e.g. "product__tenant_id").
    """

    tenant_lookup = "tenant_id"

    def request_tenant(self) -> str:
        return tenant_id_from(self.request)

    def get_queryset(self):
        return super().get_queryset().filter(**{self.tenant_lookup: self.request_tenant()})

    def get_serializer_context(self):
        context = super().get_serializer_context()
        if getattr(self, "request", None) is not None:
            context["tenant_id"] = tenant_id_from(self.request, required=False)
        return context

    def perform_create(self, serializer):
        if self.tenant_lookup == "tenant_id":
            serializer.save(tenant_id=self.request_tenant())
        else:
            serializer.save()
