from django.apps import AppConfig


class ProductsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.products"
    label = "products"

    def ready(self) -> None:
        from modules.products.events import StockAdjusted
        from modules.products.handlers import stock_adjusted_handler
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(StockAdjusted, stock_adjusted_handler)
