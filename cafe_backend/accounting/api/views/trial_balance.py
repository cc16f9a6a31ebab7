"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE API VIEW (READ-ONLY)

- Permission-gated: requires accounting.view_journalline
- Tenant-scoped; optional branch filter
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import domain_error_response, forbidden
from accounting.services.exceptions import AccountingServiceError
from accounting.services.trial_balance_service import TrialBalanceService
from backend.tenancy import tenant_id_from

REPORT_PERMISSION = "accounting.view_journalline"

TENANT_PARAM = OpenApiParameter(
    name="tenant_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Tenant id (alternatively the X-Tenant-ID header).",
)
BRANCH_PARAM = OpenApiParameter(
    name="branch_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Restrict to lines tagged with this branch.",
)


@extend_schema(
    tags=["accounting"],
    parameters=[
        TENANT_PARAM,
        BRANCH_PARAM,
        OpenApiParameter(
            name="as_of",
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Inclusive snapshot date (YYYY-MM-DD). Defaults to today.",
        ),
    ],
    responses={200: dict},
)
class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view trial balance.")

        try:
            data = TrialBalanceService().generate(
                tenant_id=tenant_id_from(request),
                as_of=request.query_params.get("as_of"),
                branch_id=request.query_params.get("branch_id") or None,
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
