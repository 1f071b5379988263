from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient

from modules.customers.models import Customer
from modules.enterprises.models import Enterprise
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO
from modules.orders.views import build_order_service
from modules.products.models import Product

VALID_CPF = "59860184275"
OTHER_CPF = "39053344705"
VALID_CNPJ = "11222333000181"
OTHER_CNPJ = "11444777000161"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="orders-tester", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def enterprise():
    return Enterprise.objects.create(
        legal_name="Papelaria Central Ltda",
        trade_name="Papelaria Central",
        cnpj=VALID_CNPJ,
    )


@pytest.fixture()
def other_enterprise():
    return Enterprise.objects.create(
        legal_name="Casa & Escritório S.A.",
        trade_name="Casa & Escritório",
        cnpj=OTHER_CNPJ,
    )


@pytest.fixture()
def customer():
    return Customer.objects.create(
        name="Ana Souza",
        email="ana@example.com",
        cpf=VALID_CPF,
    )


@pytest.fixture()
def other_customer():
    return Customer.objects.create(
        name="Bruno Lima",
        email="bruno@example.com",
        cpf=OTHER_CPF,
    )


@pytest.fixture()
def make_product(enterprise):
    """Factory: ``make_product(name="Widget", price="10.00", stock=5)``."""

    def _make(name="Widget", price="10.00", stock=5, owner=None):
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            stock=stock,
            enterprise=owner or enterprise,
        )

    return _make


@pytest.fixture()
def product(make_product):
    """Scenario A product: price 10.00, stock 5."""
    return make_product()


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def make_submission(customer, enterprise):
    """Factory for ``CreateOrderDTO``.

    ``lines`` is a list of ``(product, quantity)``; prices, names, subtotals
    and the total are derived from the catalog unless overridden.
    """

    def _make(lines, order_number="ORD-1", total=None, order_date=None, **overrides):
        items = []
        for line in lines:
            product, quantity = line[0], line[1]
            unit_price = Decimal(line[2]) if len(line) > 2 else product.price
            items.append(
                OrderItemDTO(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=unit_price * quantity,
                )
            )
        data = {
            "order_number": order_number,
            "order_date": order_date or timezone.localdate(),
            "customer_id": customer.id,
            "enterprise_id": enterprise.id,
            "total_amount": (
                Decimal(total)
                if total is not None
                else sum((item.subtotal for item in items), Decimal("0"))
            ),
            "items": items,
        }
        data.update(overrides)
        return CreateOrderDTO(**data)

    return _make


@pytest.fixture()
def order_payload(customer, enterprise):
    """Factory for the JSON body of ``POST /api/v1/orders/``."""

    def _make(lines, order_number="ORD-1", **overrides):
        items = []
        for product, quantity in lines:
            items.append(
                {
                    "product_id": str(product.id),
                    "product_name": product.name,
                    "quantity": quantity,
                    "unit_price": str(product.price),
                    "subtotal": str(product.price * quantity),
                }
            )
        payload = {
            "order_number": order_number,
            "order_date": timezone.localdate().isoformat(),
            "customer_id": str(customer.id),
            "enterprise_id": str(enterprise.id),
            "total_amount": str(sum(Decimal(item["subtotal"]) for item in items)),
            "items": items,
        }
        payload.update(overrides)
        return payload

    return _make
