# inventory/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.api.views import (
    MinStockLevelView,
    MovementHistoryView,
    PurchaseReceiveView,
    RawItemViewSet,
    StockAdjustView,
    StockAlertListView,
    StockAlertResolveView,
    StockLevelListView,
    StockTransferView,
)

router = DefaultRouter()
router.register(r"raw-items", RawItemViewSet, basename="raw-items")

urlpatterns = [
    path("", include(router.urls)),
    path("stock/", StockLevelListView.as_view(), name="stock-levels"),
    path("stock/adjust/", StockAdjustView.as_view(), name="stock-adjust"),
    path("stock/purchase/", PurchaseReceiveView.as_view(), name="stock-purchase"),
    path("stock/transfer/", StockTransferView.as_view(), name="stock-transfer"),
    path("stock/min-level/", MinStockLevelView.as_view(), name="stock-min-level"),
    path("movements/", MovementHistoryView.as_view(), name="stock-movements"),
    path("alerts/", StockAlertListView.as_view(), name="stock-alerts"),
    path("alerts/<int:pk>/resolve/", StockAlertResolveView.as_view(), name="stock-alert-resolve"),
]
