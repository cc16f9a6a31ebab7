"""
PATH: accounting/api/views/balance_sheet.py

BALANCE SHEET API VIEW (READ-ONLY)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.views.trial_balance import BRANCH_PARAM, REPORT_PERMISSION, TENANT_PARAM
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.exceptions import AccountingServiceError
from backend.tenancy import tenant_id_from


class BalanceSheetView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            TENANT_PARAM,
            BRANCH_PARAM,
            OpenApiParameter(
                name="as_of_date",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Inclusive snapshot date (YYYY-MM-DD). Defaults to today.",
            ),
        ],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view the balance sheet.")

        try:
            data = generate_balance_sheet(
                tenant_id=tenant_id_from(request),
                as_of_date=request.query_params.get("as_of_date"),
                branch_id=request.query_params.get("branch_id") or None,
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(data, status=status.HTTP_200_OK)
