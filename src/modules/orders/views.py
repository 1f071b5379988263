"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are translated through ``error_response``; the view
never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, error_response
from modules.core.pagination import StandardResultsSetPagination
from modules.core.unit_of_work import DjangoUnitOfWork
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.enterprises.repositories.django_repository import (
    EnterpriseDjangoRepository,
)
from modules.orders.catalog import CatalogReader
from modules.orders.dtos import CreateOrderDTO, UpdateOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderSerializer,
)
from modules.orders.services import OrderService
from modules.orders.state_machine import OrderStateMachine
from modules.orders.validators import OrderValidator
from modules.products.ledger import StockLedger
from modules.products.repositories.django_repository import ProductDjangoRepository


def build_order_service() -> OrderService:
    """Wire ``OrderService`` with the Django-backed collaborators."""
    uow = DjangoUnitOfWork()
    order_repository = OrderDjangoRepository()
    product_repository = ProductDjangoRepository()
    catalog = CatalogReader(
        customer_repository=CustomerDjangoRepository(),
        enterprise_repository=EnterpriseDjangoRepository(),
        product_repository=product_repository,
        order_repository=order_repository,
    )
    return OrderService(
        order_repository=order_repository,
        catalog=catalog,
        validator=OrderValidator(catalog),
        ledger=StockLedger(repository=product_repository, uow=uow),
        state_machine=OrderStateMachine(),
        uow=uow,
    )


def _invalid_payload(exc: PydanticValidationError) -> Response:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    return Response(
        {"detail": str(exc), "code": "invalid_request", "field": field},
        status=status.HTTP_400_BAD_REQUEST,
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``; every write goes through
    ``OrderService`` so validation, stock and history stay consistent.
    """

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer__name", "notes"]
    ordering_fields = ["created_at", "order_date", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        return Order.objects.select_related("customer", "enterprise")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(request=CreateOrderSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return _invalid_payload(exc)

        try:
            order = self._service.create_order(dto)
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(responses=OrderListSerializer(many=True))
    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, customer, enterprise, date range, total range)
        is handled by ``OrderFilter``; ordering by ``OrderingFilter``.
        Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Update / Delete
    # ------------------------------------------------------------------

    @extend_schema(request=UpdateOrderSerializer, responses=OrderSerializer)
    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Only the supplied fields change; ``items`` replaces the whole set.
        """
        serializer = UpdateOrderSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            dto = UpdateOrderDTO(**serializer.validated_data)
        except PydanticValidationError as exc:
            return _invalid_payload(exc)

        try:
            order = self._service.update_order(pk, dto)
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/"""
        try:
            self._service.delete_order(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Cancel (dedicated action)
    # ------------------------------------------------------------------

    @extend_schema(request=CancelOrderSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Cancels a pending order and releases its reserved stock.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.cancel_order(
                pk, notes=serializer.validated_data["notes"]
            )
        except DomainError as exc:
            return error_response(exc)

        return Response(OrderSerializer(order).data)


class _OwnerOrdersView(APIView):
    """Paginated orders of one customer or enterprise."""

    pagination_class = StandardResultsSetPagination
    throttle_scope = "order_listing"

    def _list(self, request: Request, lookup) -> Response:
        try:
            orders = lookup(build_order_service())
        except DomainError as exc:
            return error_response(exc)
        paginator = self.pagination_class()
        page = paginator.paginate_queryset(orders, request, view=self)
        return paginator.get_paginated_response(
            OrderListSerializer(page, many=True).data
        )


class CustomerOrdersView(_OwnerOrdersView):
    @extend_schema(responses=OrderListSerializer(many=True))
    def get(self, request: Request, customer_id) -> Response:
        """GET /api/v1/customers/{customer_id}/orders/"""
        return self._list(
            request, lambda service: service.list_orders_by_customer(customer_id)
        )


class EnterpriseOrdersView(_OwnerOrdersView):
    @extend_schema(responses=OrderListSerializer(many=True))
    def get(self, request: Request, enterprise_id) -> Response:
        """GET /api/v1/enterprises/{enterprise_id}/orders/"""
        return self._list(
            request, lambda service: service.list_orders_by_enterprise(enterprise_id)
        )
