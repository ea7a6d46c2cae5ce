from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from shared.concurrency import compare_and_swap
from shared.errors import ConflictError, CorruptRecordError, NotFoundError
from shared.storage import KeyValueStore, VersionConflictError
from .models import Product

NAMESPACE = "products"

class ProductRepository:

    @staticmethod
    def _load(key: str, raw: str) -> Product:
        try:
            return Product.model_validate_json(raw)
        except SchemaError as e:
            raise CorruptRecordError(NAMESPACE, key, str(e)) from e

    @staticmethod
    async def create_product(store: KeyValueStore, product: Product) -> Product:
        try:
            await store.set(NAMESPACE, product.id, product.model_dump_json(), expected_version=0)
        except VersionConflictError as e:
            raise ConflictError(f"Product id already exists: {product.id}") from e
        return product

    @staticmethod
    async def get_product_by_id(store: KeyValueStore, product_id: str) -> Optional[Product]:
        current = await store.get(NAMESPACE, product_id)
        if not current:
            return None
        return ProductRepository._load(product_id, current.value)

    @staticmethod
    async def get_all_products(store: KeyValueStore) -> list[Product]:
        return [ProductRepository._load("(scan)", v.value) for v in await store.scan(NAMESPACE)]

    @staticmethod
    async def update_product(
        store: KeyValueStore, product_id: str, mutate: Callable[[Product], Product]
    ) -> Product:
        def apply(raw: Optional[str]) -> Product:
            if raw is None:
                raise NotFoundError("Product", product_id)
            return mutate(ProductRepository._load(product_id, raw))

        return await compare_and_swap(store, NAMESPACE, product_id, apply)

    @staticmethod
    async def delete_product(store: KeyValueStore, product_id: str) -> None:
        await store.remove(NAMESPACE, product_id)
