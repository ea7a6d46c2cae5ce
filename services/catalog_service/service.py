import uuid
from decimal import Decimal

import structlog

from shared.errors import NotFoundError, ValidationError
from shared.storage import KeyValueStore
from .models import Product, ProductStatus
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = structlog.get_logger(__name__)

class CatalogService:

    @staticmethod
    async def create_product(store: KeyValueStore, data: ProductCreate) -> Product:
        product = Product(
            id=f"product-{uuid.uuid4().hex[:12]}",
            title=data.title,
            price=Decimal(str(data.price)),
            status=data.status,
        )
        return await ProductRepository.create_product(store, product)

    @staticmethod
    async def list_products(store: KeyValueStore, query: str | None = None) -> list[Product]:
        products = await ProductRepository.get_all_products(store)
        if query:
            query_words = set(query.lower().split())
            products = [p for p in products if query_words & set(p.title.lower().split())]
        return sorted(products, key=lambda p: p.title.lower())

    @staticmethod
    async def get_product(store: KeyValueStore, product_id: str) -> Product:
        product = await ProductRepository.get_product_by_id(store, product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    @staticmethod
    async def update_product(store: KeyValueStore, product_id: str, data: ProductUpdate) -> Product:
        """Edit title and/or price. Orders placed earlier keep their own copies."""
        changes = {}
        if data.title is not None:
            changes["title"] = data.title.strip()
            if not changes["title"]:
                raise ValidationError("title", "Product title is required")
        if data.price is not None:
            changes["price"] = Decimal(str(data.price))

        product = await ProductRepository.update_product(
            store, product_id, lambda p: p.model_copy(update=changes)
        )
        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        return product

    @staticmethod
    async def delete_product(store: KeyValueStore, product_id: str) -> None:
        await CatalogService.get_product(store, product_id)
        await ProductRepository.delete_product(store, product_id)
        logger.info("product_deleted", product_id=product_id)

    @staticmethod
    async def set_status(store: KeyValueStore, product_id: str, status: ProductStatus) -> Product:
        product = await ProductRepository.update_product(
            store, product_id, lambda p: p.model_copy(update={"status": status})
        )
        logger.info("product_status_changed", product_id=product_id, status=status.value)
        return product
