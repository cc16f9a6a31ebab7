# PATH: accounting/api/views/expenses.py

"""
PATH: accounting/api/views/expenses.py

EXPENSES API

GET  /api/accounting/expenses/                  (?status=, ?category=, ?branch_id=)
POST /api/accounting/expenses/                  create (pending, no ledger effect)
POST /api/accounting/expenses/<id>/approve/     posts accrual
POST /api/accounting/expenses/<id>/pay/         posts settlement
POST /api/accounting/expenses/<id>/reject/

Notes:
- Group/user permissions honored via has_perm
- Tenant-scoped: an expense of another tenant is a 404
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.serializers.expenses import ExpenseCreateSerializer, ExpenseSerializer
from accounting.models.expense import Expense
from accounting.services.exceptions import AccountingServiceError
from accounting.services.expense_service import (
    approve_expense,
    create_expense,
    pay_expense,
    reject_expense,
)
from backend.tenancy import tenant_id_from

EXPENSE_VIEW_PERMISSION = "accounting.view_expense"
EXPENSE_ADD_PERMISSION = "accounting.add_expense"
EXPENSE_CHANGE_PERMISSION = "accounting.change_expense"


class ExpenseListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseCreateSerializer

    @extend_schema(tags=["accounting"], responses=ExpenseSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view expenses.")

        qs = Expense.objects.filter(tenant_id=tenant_id_from(request)).order_by("-expense_date", "-created_at")

        for param in ("status", "category", "branch_id"):
            value = request.query_params.get(param)
            if value:
                qs = qs.filter(**{param: value})

        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=ExpenseCreateSerializer,
        responses={201: ExpenseSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_ADD_PERMISSION):
            return forbidden("You do not have permission to record expenses.")

        tenant_id = tenant_id_from(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            expense = create_expense(
                tenant_id=tenant_id,
                category=data["category"],
                description=data["description"],
                amount=data["amount"],
                vat_amount=data.get("vat_amount", 0),
                payment_method=data["payment_method"],
                branch_id=data.get("branch_id", ""),
                vendor=data.get("vendor", ""),
                expense_date=data.get("expense_date"),
                created_by=request.user.get_username(),
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class _ExpenseTransitionView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    def transition(self, expense: Expense, actor: str) -> Expense:
        raise NotImplementedError

    @extend_schema(tags=["accounting"], request=None, responses={200: ExpenseSerializer, 409: dict})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(EXPENSE_CHANGE_PERMISSION):
            return forbidden("You do not have permission to change expenses.")

        expense = Expense.objects.filter(tenant_id=tenant_id_from(request), pk=pk).first()
        if expense is None:
            return Response({"detail": "Expense not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            expense = self.transition(expense, request.user.get_username())
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)


class ExpenseApproveView(_ExpenseTransitionView):
    def transition(self, expense, actor):
        return approve_expense(expense=expense, approved_by=actor)


class ExpensePayView(_ExpenseTransitionView):
    def transition(self, expense, actor):
        return pay_expense(expense=expense, paid_by=actor)


class ExpenseRejectView(_ExpenseTransitionView):
    def transition(self, expense, actor):
        return reject_expense(expense=expense, rejected_by=actor)
