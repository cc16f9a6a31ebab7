# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API

GET  /api/accounting/accounts/                  flat list (tenant-scoped)
POST /api/accounting/accounts/                  create one account
GET  /api/accounting/accounts/tree/             nested tree
GET  /api/accounting/accounts/<id>/balance/     derived balance (?as_of=, ?branch_id=)
POST /api/accounting/accounts/seed/             idempotent default cafe chart

Permission-gated via Django model permissions (has_perm).
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.serializers.accounts import AccountCreateSerializer, AccountSerializer
from accounting.models.account import Account
from accounting.services.balance_service import money_fields, parse_date
from accounting.services.chart_of_accounts import (
    create_account,
    get_account_balance,
    get_account_tree,
    seed_default_chart,
)
from accounting.services.exceptions import AccountingServiceError
from backend.tenancy import tenant_id_from

VIEW_PERMISSION = "accounting.view_account"
ADD_PERMISSION = "accounting.add_account"

TENANT_PARAM = OpenApiParameter(
    name="tenant_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Tenant id (alternatively the X-Tenant-ID header).",
)


class AccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountCreateSerializer

    @extend_schema(tags=["accounting"], parameters=[TENANT_PARAM], responses=AccountSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view accounts.")

        tenant_id = tenant_id_from(request)
        qs = Account.objects.filter(tenant_id=tenant_id).select_related("parent").order_by("account_number")
        if request.query_params.get("include_inactive") not in ("1", "true", "True"):
            qs = qs.filter(is_active=True)

        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        parameters=[TENANT_PARAM],
        request=AccountCreateSerializer,
        responses={201: AccountSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADD_PERMISSION):
            return forbidden("You do not have permission to create accounts.")

        tenant_id = tenant_id_from(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        parent = None
        parent_number = (data.get("parent_number") or "").strip()
        if parent_number:
            parent = Account.objects.filter(tenant_id=tenant_id, account_number=parent_number).first()
            if parent is None:
                return Response(
                    {"detail": f"Parent account {parent_number} not found"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        try:
            account = create_account(
                tenant_id=tenant_id,
                account_number=data["account_number"],
                name=data["name"],
                account_type=data["account_type"],
                parent=parent,
                description=data.get("description", ""),
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountTreeView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], parameters=[TENANT_PARAM], responses={200: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view accounts.")

        tenant_id = tenant_id_from(request)
        include_inactive = request.query_params.get("include_inactive") in ("1", "true", "True")
        tree = get_account_tree(tenant_id=tenant_id, include_inactive=include_inactive)
        return Response({"tenant_id": tenant_id, "accounts": tree}, status=status.HTTP_200_OK)


class AccountBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            TENANT_PARAM,
            OpenApiParameter(name="as_of", type=str, required=False, description="YYYY-MM-DD (inclusive)"),
            OpenApiParameter(name="branch_id", type=str, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view accounts.")

        tenant_id = tenant_id_from(request)
        account = Account.objects.filter(tenant_id=tenant_id, pk=pk).first()
        if account is None:
            return Response({"detail": "Account not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            as_of = parse_date(request.query_params.get("as_of"), field="as_of")
            balance = get_account_balance(
                account,
                as_of=as_of,
                branch_id=request.query_params.get("branch_id") or None,
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "account_id": account.id,
                "account_number": account.account_number,
                "account_name": account.name,
                "normal_balance": account.normal_balance,
                "as_of": as_of.isoformat() if as_of else None,
                **money_fields("balance", balance),
            },
            status=status.HTTP_200_OK,
        )


class SeedChartView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], parameters=[TENANT_PARAM], request=None, responses={200: dict})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(ADD_PERMISSION):
            return forbidden("You do not have permission to create accounts.")

        result = seed_default_chart(tenant_id=tenant_id_from(request))
        return Response(result, status=status.HTTP_200_OK)
