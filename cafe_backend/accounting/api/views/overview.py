"""
PATH: accounting/api/views/overview.py

ACCOUNTING OVERVIEW (DASHBOARD KPIs)
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.views.income_statement import PERIOD_PARAMS
from accounting.api.views.trial_balance import BRANCH_PARAM, REPORT_PERMISSION, TENANT_PARAM
from accounting.services.exceptions import AccountingServiceError
from accounting.services.overview_service import get_accounting_overview_kpis
from backend.tenancy import tenant_id_from


class AccountingOverviewView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[TENANT_PARAM, BRANCH_PARAM, *PERIOD_PARAMS],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view accounting KPIs.")

        try:
            data = get_accounting_overview_kpis(
                tenant_id=tenant_id_from(request),
                start_date=request.query_params.get("start_date"),
                end_date=request.query_params.get("end_date"),
                branch_id=request.query_params.get("branch_id") or None,
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
