"""Read-only catalog look-ups used as ground truth by the order validator.

``CatalogReader`` wraps the customer, enterprise, product and order
repositories behind the four questions validation needs answered.  Products
come back as ``ProductSnapshot`` values so validation never holds live model
instances (or their back-references).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, Optional
from uuid import UUID

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.enterprises.repositories.interfaces import IEnterpriseRepository
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository


@dataclass(frozen=True)
class ProductSnapshot:
    id: UUID
    name: str
    price: Decimal
    stock: int
    enterprise_id: UUID

    @classmethod
    def from_entity(cls, product: Product) -> ProductSnapshot:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            stock=product.stock,
            enterprise_id=product.enterprise_id,
        )


class CatalogReader:
    def __init__(
        self,
        customer_repository: ICustomerRepository,
        enterprise_repository: IEnterpriseRepository,
        product_repository: IProductRepository,
        order_repository: IOrderRepository,
    ) -> None:
        self._customers = customer_repository
        self._enterprises = enterprise_repository
        self._products = product_repository
        self._orders = order_repository

    def get_product(self, product_id: UUID | str) -> Optional[ProductSnapshot]:
        product = self._products.get_by_id(str(product_id))
        return ProductSnapshot.from_entity(product) if product else None

    def get_products(self, product_ids: Iterable[UUID | str]) -> Dict[str, ProductSnapshot]:
        """Bulk variant of ``get_product`` keyed by ``str(id)``."""
        products = self._products.get_many(str(pid) for pid in product_ids)
        return {key: ProductSnapshot.from_entity(p) for key, p in products.items()}

    def customer_exists(self, customer_id: UUID | str) -> bool:
        return self._customers.exists(str(customer_id))

    def enterprise_exists(self, enterprise_id: UUID | str) -> bool:
        return self._enterprises.exists(str(enterprise_id))

    def order_number_exists(
        self, order_number: str, exclude_id: UUID | str | None = None
    ) -> bool:
        return self._orders.exists_by_number(
            order_number, exclude_id=str(exclude_id) if exclude_id else None
        )
