from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from procure_marine.core.formatting import convert_for_display, format_price
from ..domain.entities import Cart, CartItem

# Schémas Pydantic pour l'API du panier


class CartApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddCartItemRequest(CartApiModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(CartApiModel):
    # Une quantité < 1 retire l'article
    quantity: int


class CartResponse(CartApiModel):
    items: List[CartItem]
    total_items: int
    total_price: Decimal
    quote_items_count: int
    display_total: str = Field(..., description="Total à prix fixe dans la devise d'affichage")

    @classmethod
    def from_cart(cls, cart: Cart, currency: str, display_currency: str, rates: dict) -> "CartResponse":
        # Chaque sous-total est converti séparément; une devise sans taux reste affichée telle quelle
        shown: Dict[str, Decimal] = {}
        for item_currency, subtotal in (cart.totals_by_currency() or {currency: Decimal("0")}).items():
            amount, shown_currency = convert_for_display(subtotal, item_currency, display_currency, rates)
            shown[shown_currency] = shown.get(shown_currency, Decimal("0")) + amount
        return cls(
            items=list(cart.items),
            total_items=cart.total_items,
            total_price=cart.total_price,
            quote_items_count=cart.quote_items_count,
            display_total=" + ".join(format_price(amount, code) for code, amount in shown.items()),
        )
