"""
PATH: accounting/api/views/income_statement.py

INCOME STATEMENT (P&L) API VIEW (READ-ONLY)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.views.trial_balance import BRANCH_PARAM, REPORT_PERMISSION, TENANT_PARAM
from accounting.services.exceptions import AccountingServiceError
from accounting.services.income_statement_service import get_income_statement
from backend.tenancy import tenant_id_from

PERIOD_PARAMS = [
    OpenApiParameter(
        name="start_date",
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        description="YYYY-MM-DD (inclusive)",
    ),
    OpenApiParameter(
        name="end_date",
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        description="YYYY-MM-DD (inclusive)",
    ),
]


class IncomeStatementView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[TENANT_PARAM, BRANCH_PARAM, *PERIOD_PARAMS],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view the income statement.")

        try:
            data = get_income_statement(
                tenant_id=tenant_id_from(request),
                start_date=request.query_params.get("start_date"),
                end_date=request.query_params.get("end_date"),
                branch_id=request.query_params.get("branch_id") or None,
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
