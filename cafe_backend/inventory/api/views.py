# inventory/api/views.py

"""
======================================================
PATH: inventory/api/views.py
======================================================
INVENTORY API

/api/inventory/raw-items/                   catalog CRUD (no delete: deactivate instead)
/api/inventory/stock/?branch_id=            stock levels for every active raw item
/api/inventory/stock/adjust/                manual adjustment (one movement)
/api/inventory/stock/purchase/              purchase receipt (+ optional ledger posting)
/api/inventory/stock/transfer/              branch transfer (two movements)
/api/inventory/stock/min-level/             restock threshold
/api/inventory/movements/?branch_id=        movement history (read-only)
/api/inventory/alerts/                      open restock alerts
/api/inventory/alerts/<id>/resolve/

Every endpoint is scoped to the request tenant (X-Tenant-ID header or tenant_id).

Quantities only ever change through inventory.services.stock_ledger.
"""

from __future__ import annotations

from dataclasses import asdict

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import domain_error_response
from accounting.services.exceptions import AccountingServiceError
from backend.tenancy import TenantScopedMixin, tenant_id_from
from inventory.api.serializers import (
    MinStockLevelInputSerializer,
    PurchaseReceiptInputSerializer,
    RawItemSerializer,
    StockAdjustmentInputSerializer,
    StockAlertSerializer,
    StockMovementSerializer,
    TransferInputSerializer,
)
from inventory.exceptions import InventoryError
from inventory.models import RawItem, StockAlert, StockMovement
from inventory.services.alerts import get_active_alerts, resolve_alert
from inventory.services.purchasing import receive_purchase
from inventory.services.stock_ledger import (
    adjust,
    get_movement_history,
    get_stock_level,
    set_min_stock_level,
    transfer_stock,
)

VIEW_STOCK_PERMISSION = "inventory.view_branchstock"
CHANGE_STOCK_PERMISSION = "inventory.add_stockmovement"
CHANGE_ALERT_PERMISSION = "inventory.change_stockalert"

BRANCH_PARAM = OpenApiParameter(
    name="branch_id",
    type=str,
    location=OpenApiParameter.QUERY,
    required=True,
    description="Branch whose stock is read.",
)


def _forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


def _bad_request(exc: Exception) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)


def _raw_item_or_404(raw_item_id, tenant_id):
    return RawItem.objects.filter(pk=raw_item_id, tenant_id=tenant_id).first()


def _level_payload(level) -> dict:
    data = asdict(level)
    data["quantity"] = str(level.quantity)
    data["min_stock_level"] = str(level.min_stock_level)
    return data


@extend_schema(tags=["inventory"])
class RawItemViewSet(
    TenantScopedMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    Raw item catalog of the request tenant.

    Policy:
    - Any authenticated user can READ (recipe forms need this)
    - Writes are DjangoModelPermissions-style checks via has_perm
    - unit_cost is read-only here (purchase receipts own it)
    """

    queryset = RawItem.objects.all().order_by("name")
    serializer_class = RawItemSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["category", "is_active", "unit"]

    def _check_write(self, perm: str):
        if not self.request.user.has_perm(perm):
            return _forbidden("You do not have permission to edit raw items.")
        return None

    def create(self, request, *args, **kwargs):
        return self._check_write("inventory.add_rawitem") or super().create(request, *args, **kwargs)

    def update(self, request, *args, **kwargs):
        return self._check_write("inventory.change_rawitem") or super().update(request, *args, **kwargs)


class StockLevelListView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"], parameters=[BRANCH_PARAM], responses={200: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_STOCK_PERMISSION):
            return _forbidden("You do not have permission to view stock.")

        branch_id = (request.query_params.get("branch_id") or "").strip()
        if not branch_id:
            return Response({"detail": "branch_id is required"}, status=status.HTTP_400_BAD_REQUEST)

        items = RawItem.objects.filter(tenant_id=tenant_id_from(request), is_active=True).order_by("name")

        levels = []
        for item in items:
            payload = _level_payload(get_stock_level(branch_id=branch_id, raw_item=item))
            payload["raw_item_name"] = item.name
            levels.append(payload)

        return Response({"branch_id": branch_id, "stock": levels}, status=status.HTTP_200_OK)


class StockAdjustView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = StockAdjustmentInputSerializer

    @extend_schema(tags=["inventory"], request=StockAdjustmentInputSerializer, responses={200: dict, 400: dict})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(CHANGE_STOCK_PERMISSION):
            return _forbidden("You do not have permission to adjust stock.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        raw_item = _raw_item_or_404(data["raw_item_id"], tenant_id_from(request))
        if raw_item is None:
            return Response({"detail": "Raw item not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            result = adjust(
                branch_id=data["branch_id"],
                raw_item_id=raw_item.pk,
                delta=data["delta"],
                movement_type=StockMovement.MovementType.ADJUSTMENT,
                reference_id=data.get("reference_id", ""),
                actor=request.user.get_username(),
                note=data.get("note", ""),
            )
        except InventoryError as exc:
            return _bad_request(exc)

        return Response(
            {
                "previous_quantity": str(result.previous_quantity),
                "new_quantity": str(result.new_quantity),
                "movement": StockMovementSerializer(result.movement).data,
            },
            status=status.HTTP_200_OK,
        )


class PurchaseReceiveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PurchaseReceiptInputSerializer

    @extend_schema(
        tags=["inventory"],
        request=PurchaseReceiptInputSerializer,
        responses={200: dict, 201: dict, 400: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(CHANGE_STOCK_PERMISSION):
            return _forbidden("You do not have permission to receive stock.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        raw_item = _raw_item_or_404(data["raw_item_id"], tenant_id_from(request))
        if raw_item is None:
            return Response({"detail": "Raw item not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            receipt = receive_purchase(
                branch_id=data["branch_id"],
                raw_item=raw_item,
                quantity=data["quantity"],
                unit=data.get("unit") or None,
                total_cost=data["total_cost"],
                reference_id=data["reference_id"],
                actor=request.user.get_username(),
                payment_method=data["payment_method"],
            )
        except InventoryError as exc:
            return _bad_request(exc)
        except AccountingServiceError as exc:
            return domain_error_response(exc)

        return Response(
            {
                "new_quantity": str(receipt.adjustment.new_quantity),
                "unit_cost": str(receipt.unit_cost),
                "total_cost": str(receipt.total_cost),
                "journal_entry_id": receipt.journal_entry_id,
                "replayed": receipt.replayed,
                "movement": StockMovementSerializer(receipt.adjustment.movement).data,
            },
            status=status.HTTP_200_OK if receipt.replayed else status.HTTP_201_CREATED,
        )


class StockTransferView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TransferInputSerializer

    @extend_schema(tags=["inventory"], request=TransferInputSerializer, responses={200: dict, 400: dict})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(CHANGE_STOCK_PERMISSION):
            return _forbidden("You do not have permission to transfer stock.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        raw_item = _raw_item_or_404(data["raw_item_id"], tenant_id_from(request))
        if raw_item is None:
            return Response({"detail": "Raw item not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            out_leg, in_leg = transfer_stock(
                from_branch_id=data["from_branch_id"],
                to_branch_id=data["to_branch_id"],
                raw_item=raw_item,
                quantity=data["quantity"],
                reference_id=data.get("reference_id", ""),
                actor=request.user.get_username(),
            )
        except InventoryError as exc:
            return _bad_request(exc)

        return Response(
            {
                "from": StockMovementSerializer(out_leg.movement).data,
                "to": StockMovementSerializer(in_leg.movement).data,
            },
            status=status.HTTP_200_OK,
        )


class MinStockLevelView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = MinStockLevelInputSerializer

    @extend_schema(tags=["inventory"], request=MinStockLevelInputSerializer, responses={200: dict, 400: dict})
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(CHANGE_STOCK_PERMISSION):
            return _forbidden("You do not have permission to change stock thresholds.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        raw_item = _raw_item_or_404(data["raw_item_id"], tenant_id_from(request))
        if raw_item is None:
            return Response({"detail": "Raw item not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            set_min_stock_level(
                branch_id=data["branch_id"],
                raw_item=raw_item,
                min_stock_level=data["min_stock_level"],
            )
        except InventoryError as exc:
            return _bad_request(exc)

        level = get_stock_level(branch_id=data["branch_id"], raw_item=raw_item)
        return Response(_level_payload(level), status=status.HTTP_200_OK)


class MovementHistoryView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[
            BRANCH_PARAM,
            OpenApiParameter(name="raw_item_id", type=str, required=False),
            OpenApiParameter(name="limit", type=int, required=False, description="Default 100"),
        ],
        responses=StockMovementSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm("inventory.view_stockmovement"):
            return _forbidden("You do not have permission to view stock movements.")

        branch_id = (request.query_params.get("branch_id") or "").strip()
        if not branch_id:
            return Response({"detail": "branch_id is required"}, status=status.HTTP_400_BAD_REQUEST)

        tenant_id = tenant_id_from(request)
        raw_item = None
        raw_item_id = request.query_params.get("raw_item_id")
        if raw_item_id:
            try:
                raw_item = RawItem.objects.get(pk=raw_item_id, tenant_id=tenant_id)
            except (RawItem.DoesNotExist, ValueError, TypeError):
                return Response({"detail": "Raw item not found"}, status=status.HTTP_404_NOT_FOUND)

        try:
            limit = int(request.query_params.get("limit") or 100)
        except (TypeError, ValueError):
            return Response({"detail": "limit must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        movements = get_movement_history(branch_id=branch_id, raw_item=raw_item, limit=limit, tenant_id=tenant_id)
        return Response(StockMovementSerializer(movements, many=True).data, status=status.HTTP_200_OK)


class StockAlertListView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[OpenApiParameter(name="branch_id", type=str, required=False)],
        responses=StockAlertSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VIEW_STOCK_PERMISSION):
            return _forbidden("You do not have permission to view stock alerts.")

        alerts = get_active_alerts(
            branch_id=request.query_params.get("branch_id") or None,
            tenant_id=tenant_id_from(request),
        )
        return Response(StockAlertSerializer(alerts, many=True).data, status=status.HTTP_200_OK)


class StockAlertResolveView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["inventory"], request=None, responses={200: StockAlertSerializer, 404: dict})
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(CHANGE_ALERT_PERMISSION):
            return _forbidden("You do not have permission to resolve alerts.")

        if not StockAlert.objects.filter(pk=pk, raw_item__tenant_id=tenant_id_from(request)).exists():
            return Response({"detail": "Alert not found"}, status=status.HTTP_404_NOT_FOUND)

        alert = resolve_alert(alert_id=pk, resolved_by=request.user.get_username())

        return Response(StockAlertSerializer(alert).data, status=status.HTTP_200_OK)
