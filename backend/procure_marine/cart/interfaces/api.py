import logging

from fastapi import APIRouter, Path

from procure_marine.core.config import settings
from procure_marine.cart.application.schemas import AddCartItemRequest, CartResponse, UpdateCartItemRequest
from procure_marine.cart.domain.entities import Cart
from procure_marine.cart.domain.exceptions import ProductNotPurchasableException
from procure_marine.catalog.domain.exceptions import ProductNotFoundException
from procure_marine.catalog.interfaces.dependencies import CatalogServiceDep
from .dependencies import CartStoreDep

logger = logging.getLogger(__name__)

cart_router = APIRouter(tags=["Cart"])


def _to_response(cart: Cart) -> CartResponse:
    return CartResponse.from_cart(
        cart,
        currency=settings.DEFAULT_CURRENCY,
        display_currency=settings.DISPLAY_CURRENCY,
        rates=settings.exchange_rates,
    )


@cart_router.get("", response_model=CartResponse)
def get_cart(cart_store: CartStoreDep):
    return _to_response(cart_store.load())


@cart_router.post("/items", response_model=CartResponse)
def add_cart_item(
    payload: AddCartItemRequest,
    cart_store: CartStoreDep,
    catalog_service: CatalogServiceDep,
):
    """Ajoute un produit du catalogue; les produits en rupture sont refusés ici."""
    product = catalog_service.find_product_by_id(payload.product_id)
    if not product:
        raise ProductNotFoundException(product_id=payload.product_id)
    if not product.is_purchasable:
        logger.warning(f"API add_cart_item: produit {product.id} en rupture refusé")
        raise ProductNotPurchasableException(product.id)
    return _to_response(cart_store.add(product, payload.quantity))


@cart_router.put("/items/{product_id}", response_model=CartResponse)
def update_cart_item(
    payload: UpdateCartItemRequest,
    cart_store: CartStoreDep,
    product_id: str = Path(..., title="ID du produit"),
):
    return _to_response(cart_store.set_quantity(product_id, payload.quantity))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
def remove_cart_item(
    cart_store: CartStoreDep,
    product_id: str = Path(..., title="ID du produit"),
):
    return _to_response(cart_store.remove(product_id))


@cart_router.delete("", response_model=CartResponse)
def clear_cart(cart_store: CartStoreDep):
    return _to_response(cart_store.clear())
