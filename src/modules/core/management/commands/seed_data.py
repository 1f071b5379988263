from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone
from validate_docbr import CNPJ, CPF

from modules.core.exceptions import DomainError
from modules.customers.models import Customer
from modules.enterprises.models import Enterprise
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, OrderItemDTO, UpdateOrderDTO
from modules.orders.views import build_order_service
from modules.products.models import Product


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        enterprises = self._seed_enterprises()
        customers = self._seed_customers()
        products = self._seed_products(enterprises)
        orders_created = self._seed_orders(customers, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"enterprises={len(enterprises)}, "
                f"customers={len(customers)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="user").exists():
            User.objects.create_user("user", password="user123")
            created += 1
        return created

    def _seed_enterprises(self) -> list[Enterprise]:
        self.stdout.write("Creating enterprises...")
        enterprises: list[Enterprise] = []
        for legal_name, trade_name in [
            ("Papelaria Central Ltda", "Papelaria Central"),
            ("Casa & Escritório Comércio S.A.", "Casa & Escritório"),
        ]:
            enterprise, _ = Enterprise.objects.get_or_create(
                legal_name=legal_name,
                defaults={"trade_name": trade_name, "cnpj": CNPJ().generate()},
            )
            enterprises.append(enterprise)
        self.stdout.write(self.style.SUCCESS("Creating enterprises... Done!"))
        return enterprises

    def _seed_customers(self) -> list[Customer]:
        self.stdout.write("Creating customers...")
        customers: list[Customer] = []
        for name, email in [
            ("Ana Souza", "ana@example.com"),
            ("Bruno Lima", "bruno@example.com"),
            ("Carla Mendes", "carla@example.com"),
            ("Daniel Costa", "daniel@example.com"),
            ("Fernanda Rocha", "fernanda@example.com"),
        ]:
            customer, _ = Customer.objects.get_or_create(
                email=email,
                defaults={"name": name, "cpf": CPF().generate()},
            )
            customers.append(customer)
        self.stdout.write(self.style.SUCCESS("Creating customers... Done!"))
        return customers

    def _seed_products(self, enterprises: list[Enterprise]) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("Papel A4", Decimal("29.90")),
            ("Caneta Azul", Decimal("4.90")),
            ("Caderno", Decimal("19.90")),
            ("Grampeador", Decimal("39.90")),
            ("Agenda", Decimal("49.90")),
            ("Mesa Escritório", Decimal("899.00")),
            ("Cadeira Ergonômica", Decimal("1499.00")),
            ("Estante", Decimal("699.00")),
        ]
        for index, (name, price) in enumerate(catalog):
            enterprise = enterprises[index % len(enterprises)]
            product, _ = Product.objects.get_or_create(
                name=name,
                enterprise=enterprise,
                defaults={"price": price, "stock": random.randint(20, 200)},
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, customers: list[Customer], products: list[Product]) -> int:
        """Place orders through ``OrderService`` so stock is reserved for real."""
        self.stdout.write("Creating orders...")
        if not customers or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no customers/products)."))
            return 0

        service = build_order_service()
        by_enterprise: dict = {}
        for product in products:
            by_enterprise.setdefault(product.enterprise_id, []).append(product)

        created = 0
        today = timezone.localdate()
        for i in range(20):
            enterprise_id = random.choice(list(by_enterprise))
            available = by_enterprise[enterprise_id]
            chosen = random.sample(available, k=random.randint(1, min(3, len(available))))
            items = []
            for product in chosen:
                quantity = random.randint(1, 3)
                items.append(
                    OrderItemDTO(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=quantity,
                        unit_price=product.price,
                        subtotal=product.price * quantity,
                    )
                )
            dto = CreateOrderDTO(
                order_number=f"SEED-{i + 1:04d}",
                order_date=today - timedelta(days=random.randint(0, 30)),
                customer_id=random.choice(customers).id,
                enterprise_id=enterprise_id,
                total_amount=sum((item.subtotal for item in items), Decimal("0")),
                items=items,
                notes=f"Seed order {i + 1}",
            )
            try:
                order = service.create_order(dto)
                target = random.choice(
                    [None, OrderStatus.COMPLETED, OrderStatus.CANCELLED]
                )
                if target is not None:
                    service.update_order(order.id, UpdateOrderDTO(status=target))
            except DomainError as exc:
                self.stdout.write(self.style.WARNING(f"{dto.order_number}: {exc}"))
                continue
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
