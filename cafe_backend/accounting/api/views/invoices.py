"""
PATH: accounting/api/views/invoices.py

INVOICES API (ACCOUNTS RECEIVABLE)

GET  /api/accounting/invoices/                  (?status=, ?branch_id=)
POST /api/accounting/invoices/                  create draft (totals computed server-side)
GET  /api/accounting/invoices/<id>/
POST /api/accounting/invoices/<id>/issue/       posts Dr AR / Cr Sales, VAT
POST /api/accounting/invoices/<id>/payments/    {"amount"} or {"amount_paid"}
POST /api/accounting/invoices/<id>/void/
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response, forbidden
from accounting.api.serializers.invoices import (
    InvoiceCreateSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
)
from accounting.models.invoice import Invoice
from accounting.services.exceptions import AccountingServiceError
from accounting.services.invoice_service import (
    create_invoice,
    issue_invoice,
    record_payment,
    set_amount_paid,
    void_invoice,
)
from backend.tenancy import tenant_id_from

INVOICE_VIEW_PERMISSION = "accounting.view_invoice"
INVOICE_ADD_PERMISSION = "accounting.add_invoice"
INVOICE_CHANGE_PERMISSION = "accounting.change_invoice"


def _tenant_invoice(request, pk):
    return (
        Invoice.objects.filter(tenant_id=tenant_id_from(request), pk=pk)
        .prefetch_related("lines")
        .first()
    )


def _not_found() -> Response:
    return Response({"detail": "Invoice not found"}, status=status.HTTP_404_NOT_FOUND)


class InvoiceListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceCreateSerializer

    @extend_schema(tags=["accounting"], responses=InvoiceSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(INVOICE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view invoices.")

        qs = Invoice.objects.filter(tenant_id=tenant_id_from(request)).prefetch_related("lines")
        for param in ("status", "branch_id"):
            value = request.query_params.get(param)
            if value:
                qs = qs.filter(**{param: value})

        return Response(InvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=InvoiceCreateSerializer,
        responses={201: InvoiceSerializer, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(INVOICE_ADD_PERMISSION):
            return forbidden("You do not have permission to create invoices.")

        tenant_id = tenant_id_from(request)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            invoice = create_invoice(
                tenant_id=tenant_id,
                customer_name=data["customer_name"],
                lines=[dict(line) for line in data["lines"]],
                branch_id=data.get("branch_id", ""),
                customer_tax_number=data.get("customer_tax_number", ""),
                issue_date=data.get("issue_date"),
                due_date=data.get("due_date"),
                notes=data.get("notes", ""),
                created_by=request.user.get_username(),
            )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class InvoiceDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], responses={200: InvoiceSerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_VIEW_PERMISSION):
            return forbidden("You do not have permission to view invoices.")

        invoice = _tenant_invoice(request, pk)
        if invoice is None:
            return _not_found()
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoiceIssueView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], request=None, responses={200: InvoiceSerializer, 409: dict})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_CHANGE_PERMISSION):
            return forbidden("You do not have permission to issue invoices.")

        invoice = _tenant_invoice(request, pk)
        if invoice is None:
            return _not_found()

        try:
            invoice = issue_invoice(invoice=invoice, issued_by=request.user.get_username())
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoicePaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoicePaymentSerializer

    @extend_schema(
        tags=["accounting"],
        request=InvoicePaymentSerializer,
        responses={200: InvoiceSerializer, 400: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_CHANGE_PERMISSION):
            return forbidden("You do not have permission to record invoice payments.")

        invoice = _tenant_invoice(request, pk)
        if invoice is None:
            return _not_found()

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        actor = request.user.get_username()

        try:
            if "amount_paid" in data:
                invoice = set_amount_paid(
                    invoice=invoice,
                    amount_paid=data["amount_paid"],
                    payment_method=data["payment_method"],
                    recorded_by=actor,
                )
            else:
                invoice = record_payment(
                    invoice=invoice,
                    amount=data["amount"],
                    payment_method=data["payment_method"],
                    recorded_by=actor,
                )
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class InvoiceVoidView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], request=None, responses={200: InvoiceSerializer, 409: dict})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(INVOICE_CHANGE_PERMISSION):
            return forbidden("You do not have permission to void invoices.")

        invoice = _tenant_invoice(request, pk)
        if invoice is None:
            return _not_found()

        try:
            invoice = void_invoice(invoice=invoice, voided_by=request.user.get_username())
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_200_OK)
