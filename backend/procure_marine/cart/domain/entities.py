from decimal import Decimal
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from procure_marine.catalog.domain.entities import FixedPrice, OnRequestPrice, Product

# Entités du domaine "Cart"
# Un CartItem garde une copie complète du produit au moment de l'ajout:
# un changement de prix dans le catalogue n'affecte pas le panier en cours.


class CartItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product: Product
    quantity: int = Field(..., ge=1)


class Cart(BaseModel):
    """
    Panier normalisé: au plus un CartItem par produit, dans l'ordre d'ajout.

    Les totaux sont dérivés des items à chaque lecture et ne peuvent pas être
    positionnés directement.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    items: Tuple[CartItem, ...] = ()

    @computed_field
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def total_price(self) -> Decimal:
        # Seuls les produits à prix fixe entrent dans le total
        total = Decimal("0")
        for item in self.items:
            price = item.product.price
            if isinstance(price, FixedPrice):
                total += price.amount * item.quantity
        return total

    @computed_field
    @property
    def quote_items_count(self) -> int:
        return sum(
            item.quantity for item in self.items
            if isinstance(item.product.price, OnRequestPrice)
        )

    def totals_by_currency(self) -> Dict[str, Decimal]:
        """Sous-totaux à prix fixe par devise, dans l'ordre d'apparition."""
        totals: Dict[str, Decimal] = {}
        for item in self.items:
            price = item.product.price
            if isinstance(price, FixedPrice):
                currency = price.currency.upper()
                totals[currency] = totals.get(currency, Decimal("0")) + price.amount * item.quantity
        return totals

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: str):
        return next((item for item in self.items if item.product.id == product_id), None)


class PersistedCart(BaseModel):
    """Forme stockée du panier. Les totaux éventuellement présents sont ignorés."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    items: Tuple[CartItem, ...] = ()
