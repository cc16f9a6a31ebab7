# costing/api/urls.py

from django.urls import path

from costing.api.views import CostOrderView, EstimateOrderCostView, OrderCostingDetailView

urlpatterns = [
    path("orders/", CostOrderView.as_view(), name="cost-order"),
    path("orders/<str:order_id>/", OrderCostingDetailView.as_view(), name="order-costing-detail"),
    path("estimate/", EstimateOrderCostView.as_view(), name="estimate-order-cost"),
]
