# costing/api/views.py

"""
======================================================
PATH: costing/api/views.py
======================================================
COSTING API

POST /api/costing/orders/                   cost (and, with a tenant, post) an order
GET  /api/costing/orders/<order_id>/        stored costing record
POST /api/costing/estimate/                 price line items without touching stock

Shortages are NOT errors: a costed order with shortages is still a 200/201
with success=false in the report.
"""

from decimal import Decimal

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.tenancy import tenant_id_from
from costing.api.serializers import (
    CostOrderSerializer,
    EstimateSerializer,
    OrderCostingSerializer,
    to_line_items,
)
from costing.exceptions import CostingError
from costing.models import OrderCosting
from costing.services.costing_engine import cost_order, estimate_order_cost
from costing.services.order_completion import complete_order_costing
from inventory.exceptions import InventoryError
from recipes.exceptions import RecipeError

COST_PERMISSION = "costing.add_ordercosting"
VIEW_PERMISSION = "costing.view_ordercosting"

TENANT_PARAM = OpenApiParameter(
    name="tenant_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Tenant id (alternatively the X-Tenant-ID header).",
)


def _forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


def _decimals_to_str(value):
    if isinstance(value, dict):
        return {k: _decimals_to_str(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decimals_to_str(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    return value


class CostOrderView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CostOrderSerializer

    @extend_schema(
        tags=["costing"],
        parameters=[TENANT_PARAM],
        request=CostOrderSerializer,
        responses={200: dict, 201: dict, 400: dict, 403: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(COST_PERMISSION):
            return _forbidden("You do not have permission to cost orders.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        tenant_id = tenant_id_from(request, required=False)
        already_costed = OrderCosting.objects.filter(order_id=data["order_id"]).exists()
        actor = request.user.get_username()
        lines = to_line_items(data["line_items"])

        # Accounting errors are imported lazily, like the posting adapters.
        from accounting.services.exceptions import AccountingServiceError

        try:
            if tenant_id:
                payload = complete_order_costing(
                    tenant_id=tenant_id,
                    order_id=data["order_id"],
                    branch_id=data["branch_id"],
                    line_items=lines,
                    actor=actor,
                    total_amount=data.get("total_amount"),
                    vat_amount=data.get("vat_amount"),
                    payment_method=data["payment_method"],
                ).to_dict()
            else:
                payload = cost_order(
                    order_id=data["order_id"],
                    branch_id=data["branch_id"],
                    line_items=lines,
                    actor=actor,
                ).to_dict()
        except (CostingError, RecipeError, InventoryError, AccountingServiceError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        code = status.HTTP_200_OK if already_costed else status.HTTP_201_CREATED
        return Response(payload, status=code)


class OrderCostingDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["costing"], responses={200: OrderCostingSerializer, 404: dict})
    def get(self, request, order_id, *args, **kwargs):
        if not request.user.has_perm(VIEW_PERMISSION):
            return _forbidden("You do not have permission to view order costing.")

        record = OrderCosting.objects.filter(order_id=order_id).first()
        if record is None:
            return Response({"detail": "Order has not been costed"}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderCostingSerializer(record).data, status=status.HTTP_200_OK)


class EstimateOrderCostView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = EstimateSerializer

    @extend_schema(tags=["costing"], parameters=[TENANT_PARAM], request=EstimateSerializer, responses={200: dict})
    def post(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            estimate = estimate_order_cost(
                line_items=to_line_items(s.validated_data["line_items"]),
                tenant_id=tenant_id_from(request, required=False),
            )
        except (RecipeError, InventoryError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(_decimals_to_str(estimate), status=status.HTTP_200_OK)
