from fastapi import APIRouter, Depends, Query, status

from shared.security.dependencies import verify_internal_api_key
from shared.storage import KeyValueStore, get_store
from .schemas import ProductCreate, ProductResponse, ProductStatusUpdate, ProductUpdate
from .service import CatalogService

public_router = APIRouter()
admin_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])

@public_router.get("", response_model=list[ProductResponse])
async def list_products(
    query: str | None = Query(default=None),
    store: KeyValueStore = Depends(get_store)
):
    return await CatalogService.list_products(store, query)

@public_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, store: KeyValueStore = Depends(get_store)):
    return await CatalogService.get_product(store, product_id)

@admin_router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, store: KeyValueStore = Depends(get_store)):
    return await CatalogService.create_product(store, product)

@admin_router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    store: KeyValueStore = Depends(get_store)
):
    return await CatalogService.update_product(store, product_id, payload)

@admin_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, store: KeyValueStore = Depends(get_store)):
    await CatalogService.delete_product(store, product_id)

# Cycles live/draft/hold from the admin panel
@admin_router.patch("/{product_id}/status", response_model=ProductResponse)
async def set_product_status(
    product_id: str,
    payload: ProductStatusUpdate,
    store: KeyValueStore = Depends(get_store)
):
    return await CatalogService.set_status(store, product_id, payload.status)
