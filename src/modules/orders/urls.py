"""Order URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.orders.views import CustomerOrdersView, EnterpriseOrdersView, OrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")

urlpatterns = router.urls + [
    path(
        "customers/<uuid:customer_id>/orders/",
        CustomerOrdersView.as_view(),
        name="customer-orders",
    ),
    path(
        "enterprises/<uuid:enterprise_id>/orders/",
        EnterpriseOrdersView.as_view(),
        name="enterprise-orders",
    ),
]
