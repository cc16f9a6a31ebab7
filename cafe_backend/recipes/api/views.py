# recipes/api/views.py

"""
======================================================
PATH: recipes/api/views.py
======================================================
RECIPES API

/api/recipes/products/                      menu products (+ their recipe lines)
/api/recipes/products/<id>/cost/            recipe cost, profit and margin for one unit
/api/recipes/recipe-lines/?product=         recipe lines
/api/recipes/addons/                        add-ons

Reads are open to any authenticated user; writes need the model's
add/change/delete permission. Every route only sees the request tenant's
rows (X-Tenant-ID header or tenant_id).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.tenancy import TenantScopedMixin
from inventory.exceptions import InventoryError
from recipes.api.serializers import (
    MenuProductSerializer,
    ProductAddonSerializer,
    RecipeLineSerializer,
)
from recipes.models import MenuProduct, ProductAddon, RecipeLine
from recipes.services.recipe_costing import calculate_profit, calculate_recipe_cost

WRITE_ACTIONS = {
    "create": "add",
    "update": "change",
    "partial_update": "change",
    "destroy": "delete",
}


class _WritePermissionMixin:
    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        verb = WRITE_ACTIONS.get(self.action)
        if verb is None:
            return
        model = self.queryset.model
        perm = f"{model._meta.app_label}.{verb}_{model._meta.model_name}"
        if not request.user.has_perm(perm):
            self.permission_denied(request, message=f"You do not have permission to {verb} {model._meta.verbose_name}.")


@extend_schema(tags=["recipes"])
class MenuProductViewSet(_WritePermissionMixin, TenantScopedMixin, viewsets.ModelViewSet):
    queryset = MenuProduct.objects.prefetch_related("recipe_lines__raw_item").order_by("name")
    serializer_class = MenuProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active"]

    @extend_schema(tags=["recipes"], responses={200: dict})
    @action(detail=True, methods=["get"])
    def cost(self, request, pk=None):
        product = self.get_object()
        try:
            breakdown = calculate_recipe_cost(product)
        except InventoryError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        profit = calculate_profit(selling_price=product.price, cost=breakdown["total_cost"])
        return Response(
            {
                **breakdown,
                "total_cost": str(breakdown["total_cost"]),
                **{k: str(v) for k, v in profit.items()},
            },
            status=status.HTTP_200_OK,
        )


@extend_schema(tags=["recipes"])
class RecipeLineViewSet(_WritePermissionMixin, TenantScopedMixin, viewsets.ModelViewSet):
    tenant_lookup = "product__tenant_id"
    queryset = RecipeLine.objects.select_related("raw_item").order_by("product", "id")
    serializer_class = RecipeLineSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["product", "raw_item"]


@extend_schema(tags=["recipes"])
class ProductAddonViewSet(_WritePermissionMixin, TenantScopedMixin, viewsets.ModelViewSet):
    queryset = ProductAddon.objects.select_related("raw_item").order_by("name")
    serializer_class = ProductAddonSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active", "raw_item"]
