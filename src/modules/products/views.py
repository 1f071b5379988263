"""Product API views.

Exposes the ``ProductService`` via HTTP using DRF ViewSets.
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
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import DomainError, error_response
from modules.core.unit_of_work import DjangoUnitOfWork
from modules.products.dtos import StockAdjustmentDTO
from modules.products.filters import ProductFilter
from modules.products.ledger import StockLedger
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer, StockAdjustmentSerializer
from modules.products.services import ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """Catalog read API plus the manual stock adjustment action.

    Does **not** extend ``ModelViewSet``; stock writes go through the
    service and the ledger.
    """

    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        repository = ProductDjangoRepository()
        self._service = ProductService(
            repository=repository,
            ledger=StockLedger(repository=repository, uow=DjangoUnitOfWork()),
        )

    def get_queryset(self):
        return Product.objects.select_related("enterprise")

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            product = self._service.get_product(pk)
        except DomainError as exc:
            return error_response(exc)
        return Response(ProductSerializer(product).data)

    @extend_schema(request=StockAdjustmentSerializer, responses=ProductSerializer)
    @action(detail=True, methods=["patch"], url_path="stock")
    def update_stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/stock/

        Accepts ``{"delta": N, "reason": "..."}``.
        """
        try:
            dto = StockAdjustmentDTO(
                delta=request.data.get("delta"),
                reason=request.data.get("reason", ""),
            )
        except PydanticValidationError as exc:
            return Response(
                {"detail": str(exc), "code": "invalid_request", "field": "delta"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            product = self._service.adjust_stock(pk, dto)
        except DomainError as exc:
            return error_response(exc)

        return Response(ProductSerializer(product).data)
